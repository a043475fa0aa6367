from app.services.activity_status import (
    ActivityStatus,
    accepts_participation,
    check_status_transition,
    status_of,
)


def test_active_can_be_cancelled():
    assert check_status_transition("ACTIVE", "CANCELLED") is None


def test_cancelled_is_terminal():
    error = check_status_transition("CANCELLED", "ACTIVE")
    assert error is not None
    assert "only allowed: none" in error


def test_same_status_is_a_noop():
    assert check_status_transition("CANCELLED", "CANCELLED") is None
    assert check_status_transition("ACTIVE", "ACTIVE") is None


def test_status_derived_from_flag():
    assert status_of(False) is ActivityStatus.ACTIVE
    assert status_of(True) is ActivityStatus.CANCELLED
    assert accepts_participation(False)
    assert not accepts_participation(True)
