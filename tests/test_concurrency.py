import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from app.crud.errors import ActivityError
from app.crud.message_crud import post_message
from app.crud.participation_crud import count_participants, join_activity
from app.database import transaction
from app.models.message import Message
from app.services.clock import as_utc, utcnow


def _race(session_factory, user_ids, operation):
    """Fire operation(session, user_id) for every user at once, each in its own session/transaction."""
    barrier = threading.Barrier(len(user_ids))

    def attempt(user_id):
        session = session_factory()
        try:
            barrier.wait(timeout=10)
            with transaction(session):
                operation(session, user_id)
            return "ok"
        except ActivityError as exc:
            return exc.kind
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=len(user_ids)) as pool:
        return list(pool.map(attempt, user_ids))


def _joiner(activity_id):
    return lambda session, user_id: join_activity(session, activity_id, user_id)


def test_racing_for_last_slots(db, session_factory, make_user, make_activity):
    make_user("org")
    racers = [f"racer{i}" for i in range(8)]
    for uid in racers:
        make_user(uid)
    activity_id = make_activity("org", capacity=4)
    make_user("early")
    db.commit()
    with transaction(db):
        join_activity(db, activity_id, "early")
    # 2 of 4 taken, 2 open

    results = _race(session_factory, racers, _joiner(activity_id))

    assert results.count("ok") == 2
    assert results.count("CapacityExceeded") == len(racers) - 2
    assert count_participants(db, activity_id) == 4
    db.commit()


def test_same_user_double_join(db, session_factory, make_user, make_activity):
    make_user("org")
    make_user("bea")
    activity_id = make_activity("org", capacity=10)
    db.commit()

    results = _race(session_factory, ["bea", "bea"], _joiner(activity_id))

    assert sorted(results) == ["Conflict", "ok"]
    assert count_participants(db, activity_id) == 2
    db.commit()


def test_concurrent_senders_keep_timestamps_ordered(db, session_factory, make_user, make_activity):
    make_user("org")
    senders = [f"sender{i}" for i in range(8)]
    for uid in senders:
        make_user(uid)
    activity_id = make_activity("org", capacity=10)
    for uid in senders:
        join_activity(db, activity_id, uid)
    db.commit()

    # every sender's clock lags by a different amount
    base = utcnow()
    skew = {uid: timedelta(seconds=i) for i, uid in enumerate(senders)}

    def send(session, user_id):
        post_message(session, activity_id, user_id, f"hi from {user_id}", now=base - skew[user_id])

    results = _race(session_factory, senders, send)

    assert results == ["ok"] * len(senders)
    messages = db.query(Message).filter_by(activity_id=activity_id).order_by(Message.id.asc()).all()
    assert {m.sender_id for m in messages} == set(senders)
    stamps = [as_utc(m.created_at) for m in messages]
    assert stamps == sorted(stamps)
    db.commit()
