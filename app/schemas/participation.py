# Join/leave response schema

from typing import Literal

from app.schemas.common import CamelModel


class MembershipResult(CamelModel):
    """Success signal for join/leave. participant_count is the count right after the change."""

    message: Literal["joined", "left"]
    participant_count: int
