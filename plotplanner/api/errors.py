"""Translation of domain failures into HTTP responses."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from plotplanner.core.errors import AIError, AIRequestFailed, WeatherError, WeatherRefreshFailed
from plotplanner.services.ai_errors import format_retry_time

logger = logging.getLogger(__name__)

_WEATHER_STATUS: dict[str, tuple[int, str]] = {
    "not_found": (404, "NotFound"),
    "missing_location": (422, "UnprocessableEntity"),
    "rate_limited": (429, "RateLimited"),
    "upstream_timeout": (504, "UpstreamTimeout"),
    "upstream_error": (502, "UpstreamError"),
    "internal": (500, "InternalError"),
}

_AI_STATUS: dict[str, tuple[int, str]] = {
    "timeout": (504, "UpstreamTimeout"),
    "rate_limit": (429, "RateLimited"),
    "bad_json": (502, "UpstreamError"),
    "network": (503, "ServiceUnavailable"),
    "unknown": (500, "InternalError"),
}


def error_body(code: str, message: str, details: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


def weather_error_response(error: WeatherError) -> JSONResponse:
    status, code = _WEATHER_STATUS[error.kind]
    headers: dict[str, str] = {}
    details: dict[str, Any] = {}
    if error.kind == "rate_limited":
        headers["Retry-After"] = str(error.retry_after_seconds)
        details["retry_after"] = error.retry_after_seconds
    elif error.kind == "upstream_timeout":
        details["hint"] = "The weather provider is slow right now. Try again in a moment."
    elif error.kind == "upstream_error" and error.status_code is not None:
        details["status_code"] = error.status_code
    return JSONResponse(error_body(code, error.message, details or None), status_code=status, headers=headers)


def ai_error_response(error: AIError) -> JSONResponse:
    status, code = _AI_STATUS[error.type]
    headers: dict[str, str] = {}
    message = error.message
    if error.type == "timeout":
        message = "The AI is not responding. Try again or add the plant manually without AI scoring."
    elif error.type == "rate_limit" and error.retry_after is not None:
        headers["Retry-After"] = str(error.retry_after)
        message = f"{error.message} (retry in {format_retry_time(error.retry_after)})"

    details: dict[str, Any] = {"type": error.type, "context": error.context, "can_retry": error.can_retry}
    if error.retry_after is not None:
        details["retry_after"] = error.retry_after
    return JSONResponse(error_body(code, message, details), status_code=status, headers=headers)


def log_api_error(
    error: BaseException,
    endpoint: str,
    method: str,
    user_id: Optional[str] = None,
    params: Optional[dict[str, Any]] = None,
) -> None:
    extra: dict[str, Any] = {"endpoint": endpoint, "method": method}
    if user_id:
        extra["user_id"] = user_id
    if params:
        extra["params"] = params

    if isinstance(error, WeatherRefreshFailed):
        extra["error_code"] = _WEATHER_STATUS[error.error.kind][1]
        logger.warning("%s: %s", error.error.__class__.__name__, error, extra=extra)
        return
    if isinstance(error, AIRequestFailed):
        extra["error_code"] = _AI_STATUS[error.error.type][1]
        extra["ai_error_type"] = error.error.type
        logger.warning("AI %s failed: %s", error.error.context, error.error.details or error, extra=extra)
        return
    logger.error("Unhandled error: %s", error, extra=extra, exc_info=error)


_HTTP_CODES = {
    400: "BadRequest",
    401: "Unauthorized",
    403: "Forbidden",
    404: "NotFound",
    405: "MethodNotAllowed",
    422: "UnprocessableEntity",
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "InternalError" if exc.status_code >= 500 else "Error")
    return JSONResponse(
        error_body(code, str(exc.detail)),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(error_body("ValidationError", "Invalid request", {"errors": errors}), status_code=400)


__all__ = [
    "ai_error_response",
    "error_body",
    "http_exception_handler",
    "log_api_error",
    "validation_exception_handler",
    "weather_error_response",
]
