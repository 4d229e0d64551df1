"""
Database engine and session management for the SQL storage backend.
"""
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from esports_arena.core.config import settings

_engine = None
_SessionLocal = None


def build_engine(database_url: str) -> Engine:
    """
    Create an engine suited to the URL.

    SQLite gets ``check_same_thread=False`` (FastAPI runs sync code in a
    threadpool); an in-memory SQLite URL additionally gets a StaticPool so
    every session sees the same database. Server databases get a
    pre-pinged connection pool.
    """
    echo = os.getenv("SQL_ECHO", "false").lower() == "true"

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": echo}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    return create_engine(
        database_url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo,
    )


def get_engine() -> Engine:
    """Get or create the process-wide engine."""
    global _engine, _SessionLocal

    if _engine is None:
        _engine = build_engine(settings.DATABASE_URL)
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=_engine)

    return _engine


def get_session_factory() -> sessionmaker:
    """Get the process-wide session factory, creating the engine on first use."""
    get_engine()
    return _SessionLocal


def init_db(engine: Engine | None = None) -> None:
    """Create any missing tables."""
    from esports_arena.models import Base
    Base.metadata.create_all(bind=engine or get_engine(), checkfirst=True)
