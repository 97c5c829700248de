"""Closed error taxonomies for the weather and AI paths.

Both taxonomies are frozen values with a discriminant field (``kind`` for
weather, ``type`` for AI). Each value travels inside a single exception type
when it has to be raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

# --------------------------------------------------------------------------
# Weather refresh
# --------------------------------------------------------------------------


@dataclass(frozen=True)
class NotFound:
    plan_id: str
    kind: Literal["not_found"] = "not_found"

    @property
    def message(self) -> str:
        return f"Plan with ID {self.plan_id} not found"


@dataclass(frozen=True)
class MissingLocation:
    plan_id: str
    kind: Literal["missing_location"] = "missing_location"

    @property
    def message(self) -> str:
        return (
            f"Plan {self.plan_id} must have location (latitude/longitude) set "
            "before weather data can be fetched"
        )


@dataclass(frozen=True)
class RateLimited:
    retry_after_seconds: int
    kind: Literal["rate_limited"] = "rate_limited"

    @property
    def message(self) -> str:
        minutes = max(1, -(-self.retry_after_seconds // 60))
        plural = "s" if minutes > 1 else ""
        return f"Weather refresh rate limit exceeded. Please try again in {minutes} minute{plural}."


@dataclass(frozen=True)
class UpstreamTimeout:
    kind: Literal["upstream_timeout"] = "upstream_timeout"

    @property
    def message(self) -> str:
        return "Weather service request timed out"


@dataclass(frozen=True)
class UpstreamError:
    detail: str
    status_code: Optional[int] = None
    kind: Literal["upstream_error"] = "upstream_error"

    @property
    def message(self) -> str:
        return self.detail


@dataclass(frozen=True)
class InternalError:
    detail: str = "An unexpected error occurred while refreshing weather data."
    kind: Literal["internal"] = "internal"

    @property
    def message(self) -> str:
        return self.detail


WeatherError = Union[NotFound, MissingLocation, RateLimited, UpstreamTimeout, UpstreamError, InternalError]


class WeatherRefreshFailed(Exception):
    """Raised by the weather path; ``error`` holds the classified failure."""

    def __init__(self, error: WeatherError) -> None:
        super().__init__(error.message)
        self.error = error


# --------------------------------------------------------------------------
# AI search / fit
# --------------------------------------------------------------------------

AIErrorType = Literal["timeout", "bad_json", "rate_limit", "network", "unknown"]
AIContext = Literal["search", "fit"]

AI_ERROR_MESSAGES: dict[str, str] = {
    "timeout": "The AI did not answer within the time limit (10s)",
    "bad_json": "The AI returned an invalid response",
    "rate_limit": "Too many AI requests. Please try again shortly",
    "network": "Could not connect to the AI provider",
    "unknown": "An unexpected error occurred while talking to the AI",
}


@dataclass(frozen=True)
class AIError:
    type: AIErrorType
    message: str
    context: AIContext
    can_retry: bool
    retry_after: Optional[int] = None
    details: Optional[str] = None


class AIRequestFailed(Exception):
    """Raised by the AI gateway; ``error`` holds the classified failure."""

    def __init__(self, error: AIError) -> None:
        super().__init__(error.message)
        self.error = error


__all__ = [
    "AIContext",
    "AIError",
    "AIErrorType",
    "AIRequestFailed",
    "AI_ERROR_MESSAGES",
    "InternalError",
    "MissingLocation",
    "NotFound",
    "RateLimited",
    "UpstreamError",
    "UpstreamTimeout",
    "WeatherError",
    "WeatherRefreshFailed",
]
