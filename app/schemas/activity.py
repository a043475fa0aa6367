# Activity API request/response schemas

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from app.models.activity import MAX_CAPACITY, MIN_CAPACITY
from app.schemas.common import CamelModel
from app.schemas.message import MessageOut

ActivityCategoryLiteral = Literal["study", "meal", "sports", "social", "arts", "other"]


class ActivityCreate(CamelModel):
    """Create request. Future scheduled_at is checked in the CRUD layer against server time."""

    title: str = Field(..., min_length=1, max_length=200)
    category: ActivityCategoryLiteral
    description: Optional[str] = None
    location: str = Field(..., min_length=1, max_length=200)
    scheduled_at: datetime
    capacity: int = Field(..., ge=MIN_CAPACITY, le=MAX_CAPACITY)


class ActivityPatch(CamelModel):
    """
    Partial update. Every field is optional; only fields present in the request body
    are applied (router passes model_dump(exclude_unset=True)).
    """

    title: Optional[str] = Field(default=None, max_length=200)
    category: Optional[ActivityCategoryLiteral] = None
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=200)
    scheduled_at: Optional[datetime] = None
    capacity: Optional[int] = Field(default=None, ge=MIN_CAPACITY, le=MAX_CAPACITY)
    is_cancelled: Optional[bool] = None


class OrganizerOut(CamelModel):
    id: str
    name: str


class ActivityOut(CamelModel):
    """Activity + organizer + live participant count (list rows, create/update responses)."""

    id: int
    title: str
    category: ActivityCategoryLiteral
    description: str = ""
    location: str
    scheduled_at: datetime
    capacity: int
    participant_count: int
    organizer: OrganizerOut
    created_at: Optional[datetime] = None
    is_cancelled: bool = False


class ParticipantOut(CamelModel):
    user_id: str
    name: str
    joined_at: datetime


class ActivityDetailOut(ActivityOut):
    """GET /activities/{id}: participants by join time, messages by creation time."""

    participants: List[ParticipantOut]
    messages: List[MessageOut]
