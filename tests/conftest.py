import os
from datetime import timedelta

# must be set before app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./.pytest-huddle.db")
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ.setdefault("ALLOWED_EMAIL_DOMAINS", "harvard.edu,college.harvard.edu")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.crud.activity_crud import create_activity
from app.crud.user_crud import register_user
from app.database import build_engine, get_db
from app.main import app
from app.models import activity, message, participation, user  # noqa: F401 — registers tables
from app.models.base import Base
from app.services.clock import utcnow


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'huddle-test.db'}")
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    """Session for CRUD-level tests. Tests commit/rollback the way the routers do."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(user_id: str, name: str = None):
        user = register_user(db, name=name or user_id.title(), email=f"{user_id}@college.harvard.edu", user_id=user_id)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_activity(db):
    def _make(organizer_id: str, capacity: int = 4, days_ahead: float = 1, **overrides):
        fields = dict(
            title="Problem set night",
            category="study",
            description="Bring your own snacks",
            location="Lamont Library",
            scheduled_at=utcnow() + timedelta(days=days_ahead),
            capacity=capacity,
        )
        fields.update(overrides)
        activity_id = create_activity(db, organizer_id=organizer_id, **fields).id
        db.commit()
        return activity_id

    return _make
