"""Engine and session factory."""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from cutwork.core.config import get_settings


@lru_cache
def get_engine() -> Engine:
    """Create the engine for the configured database once."""

    url = get_settings().database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, future=True)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, future=True)


def init_db() -> None:
    """Create storage tables when missing."""

    from cutwork.db.base import Base
    import cutwork.models.entities  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
