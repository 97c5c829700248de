"""Service-layer utilities."""

from .ai_errors import create_ai_error, format_retry_time, is_ai_error, to_ai_error
from .ai_mock import MockAIGateway
from .open_meteo import DailyClimateSample, OpenMeteoArchiveClient, last_12_months_range
from .openrouter import OpenRouterGateway, build_fit_context, sanitize_user_input
from .plans import PlanService
from .rate_limiter import InMemoryRateLimiter, RateLimitResult
from .weather import MonthlyAggregate, WeatherRefreshResult, WeatherService, aggregate_monthly

__all__ = [
    "WeatherService",
    "PlanService",
    "WeatherRefreshResult",
    "MonthlyAggregate",
    "aggregate_monthly",
    "OpenMeteoArchiveClient",
    "DailyClimateSample",
    "last_12_months_range",
    "InMemoryRateLimiter",
    "RateLimitResult",
    "OpenRouterGateway",
    "MockAIGateway",
    "build_fit_context",
    "sanitize_user_input",
    "create_ai_error",
    "format_retry_time",
    "is_ai_error",
    "to_ai_error",
]
