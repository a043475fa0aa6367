# Activity model: scheduled, capacity-bounded group event

from enum import Enum as PyEnum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import false, func

from app.models.base import Base


class ActivityCategory(str, PyEnum):
    """Closed set of categories. Stored as String(20), compared via .value."""

    STUDY = "study"
    MEAL = "meal"
    SPORTS = "sports"
    SOCIAL = "social"
    ARTS = "arts"
    OTHER = "other"


CATEGORY_VALUES = tuple(c.value for c in ActivityCategory)

MIN_CAPACITY = 2
MAX_CAPACITY = 50


class Activity(Base):
    """Activity table. Participant count is derived from participations, never stored."""

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    category = Column(String(20), nullable=False, index=True)
    description = Column(Text, nullable=False, default="", server_default="")
    location = Column(String(200), nullable=False)
    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    capacity = Column(Integer, nullable=False)
    organizer_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    # one-way flag: False -> True only (see services/activity_status.py)
    is_cancelled = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            f"capacity >= {MIN_CAPACITY} AND capacity <= {MAX_CAPACITY}",
            name="ck_activities_capacity_range",
        ),
        CheckConstraint(
            "category IN ({})".format(", ".join(f"'{c}'" for c in CATEGORY_VALUES)),
            name="ck_activities_category",
        ),
    )
