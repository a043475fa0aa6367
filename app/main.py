import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import APP_ENV, CORS_ORIGINS, RUN_MIGRATIONS_ON_STARTUP
from app.crud.errors import ActivityError
from app.error_handlers import (
    activity_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.logging_config import setup_logging
from app.middleware.request_logging import request_logging_middleware
from app.routers.activities import router as activities_router
from app.routers.users import router as users_router

setup_logging()
logger = logging.getLogger(__name__)


def _run_alembic_upgrade() -> None:
    """Apply DB migrations on startup (alembic upgrade head)."""
    from alembic import command
    from alembic.config import Config

    root = Path(__file__).resolve().parent.parent
    cfg = Config(str(root / "alembic.ini"))
    cfg.attributes["configure_logger"] = False  # keep the app logging config
    command.upgrade(cfg, "head")


app = FastAPI(
    title="Huddle API",
    description="Campus activities: create, join, and chat with fellow participants",
    version="0.1.0",
)


@app.on_event("startup")
def _startup_migrate() -> None:
    """Run Alembic upgrade head when enabled. A DB that is down must not keep the app from starting."""
    if not RUN_MIGRATIONS_ON_STARTUP:
        logger.info("startup migrations disabled (env=%s)", APP_ENV)
        return
    try:
        _run_alembic_upgrade()
        logger.info("database migrated to head")
    except Exception:
        logger.exception("startup migration failed; continuing without it")


app.add_exception_handler(ActivityError, activity_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(activities_router)
app.include_router(users_router)

app.middleware("http")(request_logging_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    return {"status": "ok"}


@app.get("/", tags=["Root"])
async def root() -> dict:
    return {
        "message": "Welcome to the Huddle API.",
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
