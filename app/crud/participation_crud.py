# Join/leave CRUD (activity row lock + single conditional insert keeps capacity exact)

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, delete, func, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud.activity_crud import lock_activity
from app.crud.errors import CapacityExceeded, Conflict, Forbidden, NotFound
from app.crud.user_crud import get_user
from app.models.activity import Activity
from app.models.participation import Participation
from app.services.activity_status import accepts_participation
from app.services.clock import utcnow

logger = logging.getLogger(__name__)


def count_participants(db: Session, activity_id: int) -> int:
    return (
        db.query(func.count(Participation.id))
        .filter(Participation.activity_id == activity_id)
        .scalar()
        or 0
    )


def is_participant(db: Session, activity_id: int, user_id: str) -> bool:
    return (
        db.query(Participation.id)
        .filter(
            Participation.activity_id == activity_id,
            Participation.user_id == user_id,
        )
        .first()
        is not None
    )


def _conditional_join_stmt(activity_id: int, user_id: str, joined_at: datetime):
    """
    INSERT INTO participations (...) SELECT ... WHERE not already a member AND count < capacity

    Membership check, capacity check and insert are one statement, evaluated against
    the same snapshot. The unique constraint on (activity_id, user_id) backs it at commit.
    """
    already_member = (
        select(Participation.id)
        .where(
            Participation.activity_id == activity_id,
            Participation.user_id == user_id,
        )
        .correlate(None)
        .exists()
    )
    current_count = (
        select(func.count(Participation.id))
        .where(Participation.activity_id == activity_id)
        .correlate(None)
        .scalar_subquery()
    )
    capacity = (
        select(Activity.capacity)
        .where(Activity.id == activity_id)
        .correlate(None)
        .scalar_subquery()
    )
    source = select(
        literal(activity_id, Integer),
        literal(user_id, String),
        literal(joined_at, DateTime(timezone=True)),
    ).where(~already_member, current_count < capacity)
    return insert(Participation.__table__).from_select(["activity_id", "user_id", "joined_at"], source)


def join_activity(db: Session, activity_id: int, user_id: str, now: Optional[datetime] = None) -> int:
    """
    Join an activity.

    1. NotFound: activity missing or cancelled
    2. Conflict: already joined
    3. CapacityExceeded: participant count already at capacity
    4. otherwise insert

    - FOR UPDATE on the activity row → concurrent joiners for the last slot are serialized,
      exactly one wins.
    - 2-4 run as one conditional INSERT ... SELECT; rowcount 0 means one of the checks failed.

    Returns: participant count after the join

    ⚠️ No commit/rollback here. The caller (router) owns the transaction.
    """
    get_user(db, user_id)

    activity = lock_activity(db, activity_id)
    if activity is None or not accepts_participation(activity.is_cancelled):
        raise NotFound("Activity not found")

    try:
        inserted = db.execute(_conditional_join_stmt(activity_id, user_id, now or utcnow())).rowcount
    except IntegrityError:
        # same user racing themselves past a weaker lock: unique constraint caught it
        # rollback happens in the caller
        raise Conflict("Already joined this activity")

    if not inserted:
        if is_participant(db, activity_id, user_id):
            raise Conflict("Already joined this activity")
        logger.info("join rejected, activity %s is full (capacity=%s)", activity_id, activity.capacity)
        raise CapacityExceeded("Activity is full")

    count = count_participants(db, activity_id)
    logger.info("user %s joined activity %s (%s/%s)", user_id, activity_id, count, activity.capacity)
    return count


def leave_activity(db: Session, activity_id: int, user_id: str) -> int:
    """
    Leave an activity.

    - The organizer can never leave (their row must always exist) → Forbidden.
    - Leaving without a row is a no-op success (idempotent).
    - Cancelled activities accept no membership changes → NotFound.

    Returns: participant count after the leave

    ⚠️ No commit/rollback here. The caller (router) owns the transaction.
    """
    get_user(db, user_id)

    activity = lock_activity(db, activity_id)
    if activity is None or not accepts_participation(activity.is_cancelled):
        raise NotFound("Activity not found")
    if activity.organizer_id == user_id:
        raise Forbidden("Organizer cannot leave their own activity")

    removed = db.execute(
        delete(Participation).where(
            Participation.activity_id == activity_id,
            Participation.user_id == user_id,
        )
    ).rowcount

    count = count_participants(db, activity_id)
    if removed:
        logger.info("user %s left activity %s (%s/%s)", user_id, activity_id, count, activity.capacity)
    return count
