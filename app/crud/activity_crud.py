# Activity CRUD: create (organizer auto-joined), list/filter, detail, patch/cancel, delete

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Query, Session

from app.crud.errors import Conflict, Forbidden, NotFound, ValidationError
from app.crud.user_crud import get_user
from app.models.activity import CATEGORY_VALUES, MAX_CAPACITY, MIN_CAPACITY, Activity
from app.models.message import Message
from app.models.participation import Participation
from app.models.user import User
from app.services.activity_status import ActivityStatus, check_status_transition, status_of
from app.services.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "category", "description", "location", "scheduled_at", "capacity")
MY_ACTIVITY_ROLES = ("joined", "organized")


class ActivityRow(NamedTuple):
    """Projected view: activity + organizer display name + live participant count."""

    activity: Activity
    organizer_name: str
    participant_count: int


@dataclass
class ActivityDetail:
    row: ActivityRow
    participants: List[Tuple[Participation, str]] = field(default_factory=list)
    messages: List[Tuple[Message, str]] = field(default_factory=list)


def _required_text(value: Optional[str], name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


def _check_category(value: Any) -> str:
    if value is None or value == "":
        raise ValidationError("category is required")
    value = getattr(value, "value", value)
    if value not in CATEGORY_VALUES:
        raise ValidationError(f"category must be one of: {', '.join(CATEGORY_VALUES)}")
    return value


def _check_capacity(value: Any) -> int:
    # bool is an int subclass; reject it explicitly
    if value is None:
        raise ValidationError("capacity is required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("capacity must be an integer")
    if not MIN_CAPACITY <= value <= MAX_CAPACITY:
        raise ValidationError(f"capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}")
    return value


def _check_scheduled_at(value: Optional[datetime]) -> datetime:
    if value is None:
        raise ValidationError("scheduledAt is required")
    if not isinstance(value, datetime):
        raise ValidationError("scheduledAt must be a datetime")
    return as_utc(value)


def _rows_query(db: Session) -> Query:
    """Activity + organizer name + correlated participant count (derived, never stored)."""
    participant_count = (
        select(func.count(Participation.id))
        .where(Participation.activity_id == Activity.id)
        .correlate(Activity)
        .scalar_subquery()
        .label("participant_count")
    )
    return db.query(Activity, User.name.label("organizer_name"), participant_count).join(
        User, User.id == Activity.organizer_id
    )


def lock_activity(db: Session, activity_id: int) -> Optional[Activity]:
    """
    SELECT ... FOR UPDATE on the activity row.

    Every join/leave/message/patch for one activity goes through this lock, so
    operations on the same activity are serialized; different activities never
    contend. (SQLite: no-op, the BEGIN IMMEDIATE transaction already holds the lock.)
    """
    return (
        db.query(Activity)
        .filter(Activity.id == activity_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def create_activity(
    db: Session,
    organizer_id: str,
    title: str,
    category: str,
    description: Optional[str],
    location: str,
    scheduled_at: datetime,
    capacity: int,
    now: Optional[datetime] = None,
) -> Activity:
    """
    Create an activity and the organizer's participation row in the same transaction.

    - scheduled_at must be strictly after server time (checked here only, never again).
    - capacity in [2, 50], category in the closed set.

    ⚠️ No commit/rollback here. The router owns the transaction, so a failure
    leaves neither row behind.
    """
    title = _required_text(title, "title")
    location = _required_text(location, "location")
    category = _check_category(category)
    capacity = _check_capacity(capacity)
    scheduled_at = _check_scheduled_at(scheduled_at)
    now = as_utc(now) or utcnow()
    if scheduled_at <= now:
        raise ValidationError("scheduledAt must be in the future")

    get_user(db, organizer_id)

    activity = Activity(
        title=title,
        category=category,
        description=(description or "").strip(),
        location=location,
        scheduled_at=scheduled_at,
        capacity=capacity,
        organizer_id=organizer_id,
        is_cancelled=False,
        created_at=now,
    )
    db.add(activity)
    db.flush()  # assigns activity.id

    db.add(Participation(activity_id=activity.id, user_id=organizer_id, joined_at=now))
    db.flush()

    logger.info("activity %s created by %s (capacity=%s)", activity.id, organizer_id, capacity)
    return activity


def iter_activities(
    db: Session,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> Iterator[ActivityRow]:
    """
    Non-cancelled activities, soonest first (id breaks ties = insertion order).

    - search: case-insensitive substring of title OR description
    - category: exact match
    Filters compose with AND. Each call re-queries current state.
    """
    q = _rows_query(db).filter(Activity.is_cancelled.is_(False))
    if category:
        q = q.filter(Activity.category == category)
    needle = (search or "").strip().lower()
    if needle:
        q = q.filter(
            or_(
                func.lower(Activity.title).contains(needle, autoescape=True),
                func.lower(Activity.description).contains(needle, autoescape=True),
            )
        )
    q = q.order_by(Activity.scheduled_at.asc(), Activity.id.asc())
    for activity, organizer_name, participant_count in q:
        yield ActivityRow(activity, organizer_name, participant_count or 0)


def list_activities(db: Session, search: Optional[str] = None, category: Optional[str] = None) -> List[ActivityRow]:
    return list(iter_activities(db, search=search, category=category))


def list_my_activities(db: Session, user_id: str, role: str) -> List[ActivityRow]:
    """
    Caller's non-cancelled activities.

    - organized: caller is the organizer
    - joined: caller has a participation row but is not the organizer
    """
    if role not in MY_ACTIVITY_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(MY_ACTIVITY_ROLES)}")
    get_user(db, user_id)

    q = _rows_query(db).filter(Activity.is_cancelled.is_(False))
    if role == "organized":
        q = q.filter(Activity.organizer_id == user_id)
    else:
        member = (
            select(Participation.id)
            .where(Participation.activity_id == Activity.id, Participation.user_id == user_id)
            .correlate(Activity)
            .exists()
        )
        q = q.filter(Activity.organizer_id != user_id, member)
    q = q.order_by(Activity.scheduled_at.asc(), Activity.id.asc())
    return [ActivityRow(a, name, count or 0) for a, name, count in q]


def get_activity_row(db: Session, activity_id: int) -> ActivityRow:
    """Single projected row. Cancelled activities are still returned."""
    row = _rows_query(db).filter(Activity.id == activity_id).first()
    if row is None:
        raise NotFound("Activity not found")
    activity, organizer_name, participant_count = row
    return ActivityRow(activity, organizer_name, participant_count or 0)


def get_activity_detail(db: Session, activity_id: int) -> ActivityDetail:
    """Activity + participants (join order) + full message history (creation order)."""
    row = get_activity_row(db, activity_id)
    participants = (
        db.query(Participation, User.name)
        .join(User, User.id == Participation.user_id)
        .filter(Participation.activity_id == activity_id)
        .order_by(Participation.joined_at.asc(), Participation.id.asc())
        .all()
    )
    messages = (
        db.query(Message, User.name)
        .join(User, User.id == Message.sender_id)
        .filter(Message.activity_id == activity_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )
    return ActivityDetail(
        row=row,
        participants=[(p, name) for p, name in participants],
        messages=[(m, name) for m, name in messages],
    )


def _validate_patch(changes: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

    validated: Dict[str, Any] = {}
    for name, value in changes.items():
        if name in ("title", "location"):
            validated[name] = _required_text(value, name)
        elif name == "category":
            validated[name] = _check_category(value)
        elif name == "capacity":
            # may drop below the current count: existing members stay, only new joins are blocked
            validated[name] = _check_capacity(value)
        elif name == "scheduled_at":
            validated[name] = _check_scheduled_at(value)
        elif name == "description":
            validated[name] = (value or "").strip()
    return validated


def update_activity(db: Session, actor_id: str, activity_id: int, changes: Dict[str, Any]) -> Activity:
    """
    Organizer-only patch. Only keys present in `changes` are applied.

    is_cancelled follows services/activity_status.py: ACTIVE -> CANCELLED only.
    Field edits on a cancelled activity are rejected (terminal state).

    ⚠️ No commit here. The router owns the transaction.
    """
    get_user(db, actor_id)

    activity = lock_activity(db, activity_id)
    if activity is None:
        raise NotFound("Activity not found")
    if activity.organizer_id != actor_id:
        raise Forbidden("Only the organizer can edit this activity")

    changes = dict(changes)
    target_cancelled = changes.pop("is_cancelled", None)
    current = status_of(activity.is_cancelled).value

    if target_cancelled is not None:
        error = check_status_transition(current, status_of(bool(target_cancelled)).value)
        if error:
            raise Conflict(error)
    if changes and current == ActivityStatus.CANCELLED.value:
        raise Conflict("Cancelled activities cannot be edited")

    for name, value in _validate_patch(changes).items():
        setattr(activity, name, value)

    if target_cancelled and not activity.is_cancelled:
        activity.is_cancelled = True
        logger.info("activity %s cancelled by organizer %s", activity_id, actor_id)

    db.flush()
    if changes:
        logger.info("activity %s updated: %s", activity_id, ", ".join(sorted(changes)))
    return activity


def delete_activity(db: Session, actor_id: str, activity_id: int) -> None:
    """
    Organizer-only hard delete. Dependents go first: messages, participations, then the activity.

    ⚠️ No commit here. The router owns the transaction.
    """
    get_user(db, actor_id)

    activity = lock_activity(db, activity_id)
    if activity is None:
        raise NotFound("Activity not found")
    if activity.organizer_id != actor_id:
        raise Forbidden("Only the organizer can delete this activity")

    db.execute(delete(Message).where(Message.activity_id == activity_id))
    db.execute(delete(Participation).where(Participation.activity_id == activity_id))
    db.delete(activity)
    db.flush()
    logger.info("activity %s deleted by organizer %s", activity_id, actor_id)
