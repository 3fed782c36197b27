"""Database dependencies for FastAPI endpoints."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from cutwork.db.session import get_session_factory


def get_db_session() -> Generator[Session, None, None]:
    """Yield a transactional SQLAlchemy session."""

    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()
