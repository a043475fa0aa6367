# Chat message schemas

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class MessageCreate(CamelModel):
    """Blank-after-trim content is rejected in the CRUD layer (ValidationError)."""

    content: str = Field(..., max_length=2000)


class MessageOut(CamelModel):
    id: int
    activity_id: int
    sender_id: str
    sender_name: str
    content: str
    created_at: datetime
