import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from app.config import DATABASE_URL
from app.crud.errors import ActivityError, PersistenceError

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    """
    Create the SQLAlchemy engine for the given URL.

    - future=True: 2.0 style
    - SQLite (tests / local dev): foreign keys on, and every transaction starts
      with BEGIN IMMEDIATE so the write lock is held from the first statement.
      SQLite ignores FOR UPDATE, so this is what serializes join/leave/message.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False, future=True, pool_pre_ping=True)

    sqlite_engine = create_engine(
        url,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(sqlite_engine, "connect")
    def _sqlite_on_connect(dbapi_connection, connection_record) -> None:
        # hand transaction control to the "begin" listener below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sqlite_engine, "begin")
    def _sqlite_on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return sqlite_engine


engine: Engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """
    DB session for FastAPI dependency injection.

    Usage:

    @router.get("/items")
    def list_items(db: Session = Depends(get_db)):
        ...
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Router-owned unit of work: commit on success, rollback on any error.

    - ActivityError → re-raised as is (already carries kind/status)
    - other SQLAlchemyError → PersistenceError; nothing is left half-written
    """
    try:
        yield db
        db.commit()
    except ActivityError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("database error, transaction rolled back")
        raise PersistenceError("Storage failure, nothing was saved") from exc
