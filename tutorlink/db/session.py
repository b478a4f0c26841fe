# tutorlink/db/session.py
# Database session management
#
# Two engine modes:
#   PostgreSQL → pooled engine (DATABASE_URL in .env)
#   SQLite     → single shared connection for ":memory:" URLs (tests, demos)
#
# FastAPI endpoints get a session via: Depends(get_db)

import json
import logging
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tutorlink.core.config import settings

logger = logging.getLogger("tutorlink.db")


def _json_serializer(value) -> str:
    return json.dumps(value, ensure_ascii=False)


def _build_engine(database_url: str) -> Engine:
    """
    Build the engine for the configured DATABASE_URL.

    - sqlite: check_same_thread off (FastAPI runs sync endpoints in a
              threadpool); in-memory databases share one connection so
              every session sees the same tables
    - others: pre-ping + small pool

    JSON columns are written with ensure_ascii=False so Bangla subjects are
    stored as typed and the subject filters can match them.
    """
    if database_url.startswith("sqlite"):
        kwargs = {
            "connect_args": {"check_same_thread": False},
            "json_serializer": _json_serializer,
        }
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=1800,  # Recycle connections every 30 min
        echo=settings.debug,
        json_serializer=_json_serializer,
    )


# ── Engine ────────────────────────────────────────────────────────────────────
engine = _build_engine(settings.database_url)

# ── Session Factory ───────────────────────────────────────────────────────────
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Prevents lazy load errors after commit
)


# ── FastAPI Dependency ────────────────────────────────────────────────────────
def get_db() -> Generator[Session, None, None]:
    """
    Dependency injected into every FastAPI endpoint that needs DB access.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...

    Guarantees the session is always closed, even on exceptions.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ── Health Check Helper ───────────────────────────────────────────────────────
def check_db_connection() -> bool:
    """
    Used by /health endpoint to verify DB connectivity.
    Returns True if connected, False otherwise.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.warning("Database connection check failed: %s", exc)
        return False
