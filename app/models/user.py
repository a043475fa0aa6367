# User model: community member (identity is issued upstream)

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from app.models.base import Base


class User(Base):
    """Member table. id is the identity provider's opaque user id; email is institutional."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
