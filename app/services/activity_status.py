# Activity status state machine: allowed transitions only.
# ACTIVE -> CANCELLED
# CANCELLED -> (none)
#
# Stored as activities.is_cancelled (bool); the status name is derived.

from enum import Enum as PyEnum
from typing import Optional


class ActivityStatus(str, PyEnum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


# Allowed target statuses from each current status.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "ACTIVE": {"CANCELLED"},
    "CANCELLED": set(),
}


def status_of(is_cancelled: bool) -> ActivityStatus:
    return ActivityStatus.CANCELLED if is_cancelled else ActivityStatus.ACTIVE


def check_status_transition(current: str, target: str) -> Optional[str]:
    """
    Validate status transition. Returns None if allowed (or if current == target),
    else a clear error message for HTTP 409.
    """
    if current == target:
        return None
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if target not in allowed:
        allowed_str = ", ".join(sorted(allowed)) if allowed else "none"
        return (
            f"Transition from {current} to {target} is not allowed. "
            f"From {current} only allowed: {allowed_str}."
        )
    return None


def accepts_participation(is_cancelled: bool) -> bool:
    """Join/leave/message are only accepted while ACTIVE."""
    return status_of(is_cancelled) is ActivityStatus.ACTIVE
