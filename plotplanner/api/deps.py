"""API dependencies."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Generator
from functools import lru_cache
from typing import Optional, Union

from fastapi import Header, HTTPException
from sqlmodel import Session

from plotplanner.core.config import settings
from plotplanner.db.session import get_session
from plotplanner.services.ai_mock import MockAIGateway
from plotplanner.services.open_meteo import OpenMeteoArchiveClient
from plotplanner.services.openrouter import OpenRouterGateway
from plotplanner.services.rate_limiter import InMemoryRateLimiter

logger = logging.getLogger(__name__)

_weather_refresh_limiter = InMemoryRateLimiter(
    window_seconds=settings.weather_refresh_window_seconds,
    cleanup_interval_seconds=settings.weather_limiter_cleanup_seconds,
)


def get_db() -> Generator[Session, None, None]:
    with get_session() as session:
        yield session


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> uuid.UUID:
    """Identity of the caller as established by the auth layer in front of the API."""

    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required.")
    try:
        return uuid.UUID(x_user_id)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail="Authentication required.") from exc


def get_weather_limiter() -> InMemoryRateLimiter:
    return _weather_refresh_limiter


def get_archive_client() -> OpenMeteoArchiveClient:
    return OpenMeteoArchiveClient()


@lru_cache(maxsize=1)
def _build_ai_gateway() -> Union[OpenRouterGateway, MockAIGateway]:
    if settings.ai_use_mock:
        logger.info("Using mock AI gateway")
        return MockAIGateway()
    return OpenRouterGateway()


def get_ai_gateway() -> Union[OpenRouterGateway, MockAIGateway]:
    try:
        return _build_ai_gateway()
    except ValueError as exc:
        logger.error("AI gateway is not configured: %s", exc)
        raise HTTPException(status_code=503, detail="AI provider is not configured.") from exc
