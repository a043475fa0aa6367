import pytest

from app.crud.activity_crud import update_activity
from app.crud.errors import CapacityExceeded, Conflict, Forbidden, NotFound
from app.crud.participation_crud import count_participants, is_participant, join_activity, leave_activity


def test_capacity_two_scenario(db, make_user, make_activity):
    for uid in ("org", "bea", "cal"):
        make_user(uid)
    activity_id = make_activity("org", capacity=2)
    assert count_participants(db, activity_id) == 1

    assert join_activity(db, activity_id, "bea") == 2
    db.commit()

    with pytest.raises(CapacityExceeded):
        join_activity(db, activity_id, "cal")
    db.rollback()

    assert leave_activity(db, activity_id, "bea") == 1
    db.commit()

    assert join_activity(db, activity_id, "cal") == 2
    db.commit()
    assert is_participant(db, activity_id, "cal")
    assert not is_participant(db, activity_id, "bea")


def test_join_twice_conflicts(db, make_user, make_activity):
    make_user("org")
    make_user("bea")
    activity_id = make_activity("org")

    join_activity(db, activity_id, "bea")
    db.commit()
    with pytest.raises(Conflict) as exc_info:
        join_activity(db, activity_id, "bea")
    assert not isinstance(exc_info.value, CapacityExceeded)
    db.rollback()
    assert count_participants(db, activity_id) == 2


def test_already_joined_wins_over_full(db, make_user, make_activity):
    make_user("org")
    make_user("bea")
    activity_id = make_activity("org", capacity=2)
    join_activity(db, activity_id, "bea")
    db.commit()

    with pytest.raises(Conflict) as exc_info:
        join_activity(db, activity_id, "org")
    assert exc_info.value.kind == "Conflict"


def test_join_missing_activity(db, make_user):
    make_user("bea")
    with pytest.raises(NotFound):
        join_activity(db, 12345, "bea")


def test_join_unknown_user(db, make_user, make_activity):
    make_user("org")
    activity_id = make_activity("org")
    with pytest.raises(NotFound):
        join_activity(db, activity_id, "ghost")


def test_join_cancelled_activity(db, make_user, make_activity):
    make_user("org")
    make_user("bea")
    activity_id = make_activity("org")
    update_activity(db, "org", activity_id, {"is_cancelled": True})
    db.commit()

    with pytest.raises(NotFound):
        join_activity(db, activity_id, "bea")


def test_join_blocked_after_capacity_shrink(db, make_user, make_activity):
    for uid in ("org", "a", "b", "c"):
        make_user(uid)
    activity_id = make_activity("org", capacity=4)
    join_activity(db, activity_id, "a")
    join_activity(db, activity_id, "b")
    db.commit()
    update_activity(db, "org", activity_id, {"capacity": 2})
    db.commit()

    with pytest.raises(CapacityExceeded):
        join_activity(db, activity_id, "c")


def test_organizer_cannot_leave(db, make_user, make_activity):
    make_user("org")
    activity_id = make_activity("org")
    with pytest.raises(Forbidden):
        leave_activity(db, activity_id, "org")
    db.rollback()
    assert is_participant(db, activity_id, "org")


def test_leave_is_idempotent(db, make_user, make_activity):
    make_user("org")
    make_user("bea")
    activity_id = make_activity("org")
    join_activity(db, activity_id, "bea")
    db.commit()

    assert leave_activity(db, activity_id, "bea") == 1
    db.commit()
    assert leave_activity(db, activity_id, "bea") == 1
    db.commit()


def test_leave_without_joining_is_noop(db, make_user, make_activity):
    make_user("org")
    make_user("bea")
    activity_id = make_activity("org")
    assert leave_activity(db, activity_id, "bea") == 1


def test_leave_missing_activity(db, make_user):
    make_user("bea")
    with pytest.raises(NotFound):
        leave_activity(db, 999, "bea")
