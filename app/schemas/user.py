# Member registration schemas

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """id is optional: pass the identity provider's user id, or let the server generate one."""

    id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None
