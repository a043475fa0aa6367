# Member API: registration (institutional email) and lookup
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user_id
from app.crud import user_crud
from app.database import get_db, transaction
from app.schemas.common import ERROR_RESPONSES
from app.schemas.user import UserCreate, UserOut
from app.services.clock import as_utc

router = APIRouter(prefix="/users", tags=["Users"], responses=ERROR_RESPONSES)


def _user_to_out(user) -> UserOut:
    return UserOut(id=user.id, name=user.name, email=user.email, created_at=as_utc(user.created_at))


@router.post("", response_model=UserOut, status_code=201)
def register_user(body: UserCreate, db: Session = Depends(get_db)) -> UserOut:
    """Register a member. Only institutional email domains are accepted."""
    with transaction(db):
        user = user_crud.register_user(db, name=body.name, email=body.email, user_id=body.id)
        out = _user_to_out(user)
    return out


@router.get("/me", response_model=UserOut)
def get_me(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)) -> UserOut:
    return _user_to_out(user_crud.get_user(db, user_id))


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: str,
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> UserOut:
    return _user_to_out(user_crud.get_user(db, user_id))
