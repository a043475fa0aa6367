# Member CRUD (registration gated by institutional email domain)

import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.config import ALLOWED_EMAIL_DOMAINS
from app.crud.errors import Conflict, NotFound, ValidationError
from app.models.user import User

logger = logging.getLogger(__name__)


def is_institutional_email(email: str, domains: Iterable[str] = ALLOWED_EMAIL_DOMAINS) -> bool:
    """True if the address ends with @<domain> for one of the allowed domains."""
    email = email.strip().lower()
    if email.count("@") != 1 or email.startswith("@"):
        return False
    return any(email.endswith("@" + d) for d in domains)


def register_user(db: Session, name: str, email: str, user_id: Optional[str] = None) -> User:
    """
    Register a member.

    - name must be non-blank, email must be institutional and unused.
    - user_id defaults to a fresh uuid4 (the identity provider may pass its own).

    ⚠️ No commit here. The caller owns the transaction.
    """
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name:
        raise ValidationError("Name is required")
    if not is_institutional_email(email):
        allowed = ", ".join("@" + d for d in ALLOWED_EMAIL_DOMAINS)
        raise ValidationError(f"Please use your institutional email address ({allowed})")

    if db.query(User).filter(User.email == email).first() is not None:
        raise Conflict("An account with this email already exists")
    if user_id is not None and db.get(User, user_id) is not None:
        raise Conflict("User id already registered")

    user = User(id=user_id or str(uuid.uuid4()), name=name, email=email)
    db.add(user)
    db.flush()
    logger.info("registered user %s", user.id)
    return user


def get_user(db: Session, user_id: str) -> User:
    """Fetch a member or raise NotFound."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user
