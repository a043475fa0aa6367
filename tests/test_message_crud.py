from datetime import timedelta

import pytest

from app.crud.activity_crud import update_activity
from app.crud.errors import Forbidden, NotFound, ValidationError
from app.crud.message_crud import post_message
from app.crud.participation_crud import count_participants, join_activity, leave_activity
from app.models.message import Message
from app.services.clock import as_utc, utcnow


def test_only_participants_may_post(db, make_user, make_activity):
    make_user("org")
    make_user("bea")
    activity_id = make_activity("org")

    with pytest.raises(Forbidden):
        post_message(db, activity_id, "bea", "hi")
    db.rollback()

    join_activity(db, activity_id, "bea")
    db.commit()
    message = post_message(db, activity_id, "bea", "hi")
    db.commit()
    assert message.content == "hi"
    assert message.sender_id == "bea"


def test_organizer_can_post(db, make_user, make_activity):
    make_user("org")
    activity_id = make_activity("org")
    assert post_message(db, activity_id, "org", "welcome!").id is not None


def test_former_participant_cannot_post(db, make_user, make_activity):
    make_user("org")
    make_user("bea")
    activity_id = make_activity("org")
    join_activity(db, activity_id, "bea")
    leave_activity(db, activity_id, "bea")
    db.commit()
    with pytest.raises(Forbidden):
        post_message(db, activity_id, "bea", "still here?")


@pytest.mark.parametrize("content", ["", "   ", "\n\t", None])
def test_blank_content_rejected(db, make_user, make_activity, content):
    make_user("org")
    activity_id = make_activity("org")
    with pytest.raises(ValidationError):
        post_message(db, activity_id, "org", content)


def test_blank_content_checked_before_activity(db, make_user):
    make_user("org")
    with pytest.raises(ValidationError):
        post_message(db, 999, "org", "  ")


def test_content_is_trimmed(db, make_user, make_activity):
    make_user("org")
    activity_id = make_activity("org")
    assert post_message(db, activity_id, "org", "  see you at 7  ").content == "see you at 7"


def test_missing_activity(db, make_user):
    make_user("org")
    with pytest.raises(NotFound):
        post_message(db, 999, "org", "hello?")


def test_cancelled_activity_rejects_messages(db, make_user, make_activity):
    make_user("org")
    activity_id = make_activity("org")
    update_activity(db, "org", activity_id, {"is_cancelled": True})
    db.commit()
    with pytest.raises(NotFound):
        post_message(db, activity_id, "org", "anyone?")


def test_timestamps_never_go_backwards(db, make_user, make_activity):
    make_user("org")
    activity_id = make_activity("org")
    now = utcnow()

    first = post_message(db, activity_id, "org", "first", now=now)
    db.commit()
    # clock stepped back
    second = post_message(db, activity_id, "org", "second", now=now - timedelta(seconds=30))
    db.commit()

    assert as_utc(second.created_at) >= as_utc(first.created_at)
    assert second.id > first.id


def test_posting_does_not_touch_membership(db, make_user, make_activity):
    make_user("org")
    activity_id = make_activity("org")
    post_message(db, activity_id, "org", "one")
    post_message(db, activity_id, "org", "two")
    db.commit()
    assert count_participants(db, activity_id) == 1
    assert db.query(Message).filter_by(activity_id=activity_id).count() == 2
