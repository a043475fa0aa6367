# Chat message CRUD (append-only, participants only)

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.activity_crud import lock_activity
from app.crud.errors import Forbidden, NotFound, ValidationError
from app.crud.participation_crud import is_participant
from app.crud.user_crud import get_user
from app.models.message import Message
from app.services.activity_status import accepts_participation
from app.services.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


def _next_timestamp(db: Session, activity_id: int, now: datetime) -> datetime:
    """Server time, clamped so created_at never goes backwards within one activity."""
    last = db.query(func.max(Message.created_at)).filter(Message.activity_id == activity_id).scalar()
    last = as_utc(last)
    if last is not None and last > now:
        return last
    return now


def post_message(
    db: Session,
    activity_id: int,
    sender_id: str,
    content: str,
    now: Optional[datetime] = None,
) -> Message:
    """
    Append a chat message.

    - ValidationError: content blank after trim
    - NotFound: activity missing or cancelled
    - Forbidden: sender has no participation row (organizer always has one)

    The activity row lock orders concurrent senders, so created_at is
    non-decreasing in id order. Never touches activities/participations.

    ⚠️ No commit here. The router owns the transaction.
    """
    text = content.strip() if isinstance(content, str) else ""
    if not text:
        raise ValidationError("Message content is required")

    get_user(db, sender_id)

    activity = lock_activity(db, activity_id)
    if activity is None or not accepts_participation(activity.is_cancelled):
        raise NotFound("Activity not found")
    if not is_participant(db, activity_id, sender_id):
        raise Forbidden("Must be a participant to send messages")

    message = Message(
        activity_id=activity_id,
        sender_id=sender_id,
        content=text,
        created_at=_next_timestamp(db, activity_id, as_utc(now) or utcnow()),
    )
    db.add(message)
    db.flush()
    logger.info("message %s posted to activity %s by %s", message.id, activity_id, sender_id)
    return message
