"""Classification of AI provider failures into ``AIError`` values."""

from __future__ import annotations

import asyncio
import math
from typing import Optional

import httpx

from plotplanner.core.errors import AI_ERROR_MESSAGES, AIContext, AIError, AIErrorType, AIRequestFailed

DEFAULT_RATE_LIMIT_RETRY_AFTER = 60


def create_ai_error(
    type: AIErrorType,
    context: AIContext,
    retry_after: Optional[int] = None,
    details: Optional[str] = None,
) -> AIError:
    if type == "rate_limit" and retry_after is None:
        retry_after = DEFAULT_RATE_LIMIT_RETRY_AFTER
    return AIError(
        type=type,
        message=AI_ERROR_MESSAGES[type],
        context=context,
        can_retry=type != "bad_json",
        retry_after=retry_after,
        details=details,
    )


def is_ai_error(value: object) -> bool:
    return isinstance(value, AIError)


def to_ai_error(error: BaseException | AIError, context: AIContext) -> AIError:
    """Collapse any failure into exactly one ``AIError``.

    ``bad_json`` is never produced here; only response validation does that.
    """

    if isinstance(error, AIError):
        return error
    if isinstance(error, AIRequestFailed):
        return error.error
    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError, asyncio.CancelledError)):
        return create_ai_error("timeout", context)
    if isinstance(error, httpx.TransportError):
        return create_ai_error("network", context, details=str(error) or error.__class__.__name__)
    return create_ai_error("unknown", context, details=str(error) or error.__class__.__name__)


def format_retry_time(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    return f"{math.ceil(seconds / 60)}m"


__all__ = ["create_ai_error", "format_retry_time", "is_ai_error", "to_ai_error"]
