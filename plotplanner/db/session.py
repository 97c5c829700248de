"""SQLModel session management."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from plotplanner.core.config import settings
from plotplanner.core.errors import InternalError, NotFound, WeatherError

logger = logging.getLogger(__name__)

engine = create_engine(settings.database_url, echo=False, pool_pre_ping=True)


def init_db() -> None:
    SQLModel.metadata.create_all(engine)


@contextmanager
def get_session() -> Iterator[Session]:
    """Get a database session as a context manager (for use with 'with' statement)."""
    session = Session(engine)
    try:
        yield session
    finally:
        session.close()


def translate_storage_error(exc: SQLAlchemyError, plan_id: str) -> WeatherError:
    """Map a storage-layer failure onto the weather error taxonomy."""

    if isinstance(exc, NoResultFound):
        return NotFound(plan_id=plan_id)
    original = getattr(exc, "orig", None)
    code = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    logger.error("Storage error for plan %s (sqlstate=%s): %s", plan_id, code, exc)
    return InternalError(detail="Failed to read or write weather data.")
