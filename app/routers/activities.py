# Activity API: create/list/detail/patch/delete, join/leave, chat
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user_id
from app.crud import activity_crud, message_crud, participation_crud
from app.crud.activity_crud import ActivityDetail, ActivityRow
from app.crud.user_crud import get_user
from app.database import get_db, transaction
from app.models.message import Message
from app.schemas.activity import (
    ActivityCategoryLiteral,
    ActivityCreate,
    ActivityDetailOut,
    ActivityOut,
    ActivityPatch,
    OrganizerOut,
    ParticipantOut,
)
from app.schemas.common import ERROR_RESPONSES
from app.schemas.message import MessageCreate, MessageOut
from app.schemas.participation import MembershipResult
from app.services.clock import as_utc

router = APIRouter(prefix="/activities", tags=["Activities"], responses=ERROR_RESPONSES)


def _activity_to_out(row: ActivityRow) -> ActivityOut:
    """ActivityRow → ActivityOut. Datetimes normalized to UTC (SQLite returns naive values)."""
    activity = row.activity
    return ActivityOut(
        id=activity.id,
        title=activity.title,
        category=activity.category,
        description=activity.description or "",
        location=activity.location,
        scheduled_at=as_utc(activity.scheduled_at),
        capacity=activity.capacity,
        participant_count=row.participant_count,
        organizer=OrganizerOut(id=activity.organizer_id, name=row.organizer_name),
        created_at=as_utc(activity.created_at),
        is_cancelled=bool(activity.is_cancelled),
    )


def _message_to_out(message: Message, sender_name: str) -> MessageOut:
    return MessageOut(
        id=message.id,
        activity_id=message.activity_id,
        sender_id=message.sender_id,
        sender_name=sender_name,
        content=message.content,
        created_at=as_utc(message.created_at),
    )


def _detail_to_out(detail: ActivityDetail) -> ActivityDetailOut:
    base = _activity_to_out(detail.row)
    return ActivityDetailOut(
        **base.model_dump(),
        participants=[
            ParticipantOut(user_id=p.user_id, name=name, joined_at=as_utc(p.joined_at))
            for p, name in detail.participants
        ],
        messages=[_message_to_out(m, name) for m, name in detail.messages],
    )


@router.post("", response_model=ActivityOut, status_code=201)
def create_activity(
    body: ActivityCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ActivityOut:
    """Create an activity. The organizer is joined in the same transaction (participantCount=1)."""
    with transaction(db):
        activity = activity_crud.create_activity(
            db,
            organizer_id=user_id,
            title=body.title,
            category=body.category,
            description=body.description,
            location=body.location,
            scheduled_at=body.scheduled_at,
            capacity=body.capacity,
        )
    return _activity_to_out(activity_crud.get_activity_row(db, activity.id))


@router.get("", response_model=List[ActivityOut])
def list_activities(
    search: Optional[str] = Query(None, max_length=200, description="title/description substring, case-insensitive"),
    category: Optional[ActivityCategoryLiteral] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[ActivityOut]:
    """Non-cancelled activities, soonest first."""
    get_user(db, user_id)
    return [_activity_to_out(row) for row in activity_crud.iter_activities(db, search=search, category=category)]


@router.get("/mine", response_model=List[ActivityOut])
def list_my_activities(
    role: Literal["joined", "organized"] = Query("joined"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[ActivityOut]:
    """Caller's activities: joined (as non-organizer) or organized."""
    return [_activity_to_out(row) for row in activity_crud.list_my_activities(db, user_id, role)]


@router.get("/{activity_id}", response_model=ActivityDetailOut)
def get_activity(
    activity_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ActivityDetailOut:
    """Detail with participants and chat history. Cancelled activities are still readable."""
    get_user(db, user_id)
    return _detail_to_out(activity_crud.get_activity_detail(db, activity_id))


@router.patch("/{activity_id}", response_model=ActivityOut)
def patch_activity(
    activity_id: int,
    body: ActivityPatch,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ActivityOut:
    """Organizer-only edit/cancel. Fields missing from the body are left untouched."""
    with transaction(db):
        activity_crud.update_activity(db, user_id, activity_id, body.model_dump(exclude_unset=True))
    return _activity_to_out(activity_crud.get_activity_row(db, activity_id))


@router.delete("/{activity_id}", status_code=204)
def delete_activity(
    activity_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Response:
    """Organizer-only delete; messages and participations are removed first."""
    with transaction(db):
        activity_crud.delete_activity(db, user_id, activity_id)
    return Response(status_code=204)


@router.post("/{activity_id}/join", response_model=MembershipResult)
def post_join(
    activity_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MembershipResult:
    """Join. 404 missing/cancelled, 409 Conflict (already joined) or CapacityExceeded (full)."""
    with transaction(db):
        count = participation_crud.join_activity(db, activity_id, user_id)
    return MembershipResult(message="joined", participant_count=count)


@router.post("/{activity_id}/leave", response_model=MembershipResult)
def post_leave(
    activity_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MembershipResult:
    """Leave. Idempotent; the organizer gets 403."""
    with transaction(db):
        count = participation_crud.leave_activity(db, activity_id, user_id)
    return MembershipResult(message="left", participant_count=count)


@router.post("/{activity_id}/messages", response_model=MessageOut, status_code=201)
def post_message(
    activity_id: int,
    body: MessageCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageOut:
    """Post to the activity chat. Participants only (organizer included)."""
    with transaction(db):
        message = message_crud.post_message(db, activity_id, user_id, body.content)
        sender_name = get_user(db, user_id).name
        out = _message_to_out(message, sender_name)
    return out
