"""Engine, session factory and declarative base for stored accounts and rubrics."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from pitch_api.config import get_settings

IN_MEMORY_URLS = ("sqlite://", "sqlite:///", "sqlite:///:memory:")


def build_engine(database_url: str) -> Engine:
    """
    Engine for ``database_url``.

    SQLite connections are shared across threads, and an in-memory database
    is pinned to one connection so every session sees the same tables.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True, pool_size=10, max_overflow=20)

    options = {"connect_args": {"check_same_thread": False}}
    if database_url in IN_MEMORY_URLS:
        options["poolclass"] = StaticPool
    return create_engine(database_url, **options)


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False)
Base = declarative_base()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create any missing tables."""
    # models register themselves on Base when imported
    from pitch_api.auth import models as _accounts  # noqa: F401
    from pitch_api.rubrics import models as _rubrics  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
