# Participation model: (activity, user) membership edge

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from app.models.base import Base


class Participation(Base):
    """Participation table. At most one row per (activity, user); id doubles as join order tie-break."""

    __tablename__ = "participations"

    id = Column(Integer, primary_key=True, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (UniqueConstraint("activity_id", "user_id", name="uq_participation_activity_user"),)
