"""Cached monthly climate endpoints for plans."""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlmodel import Session

from plotplanner.api.deps import get_archive_client, get_current_user_id, get_db, get_weather_limiter
from plotplanner.api.errors import log_api_error, weather_error_response
from plotplanner.core.errors import InternalError, WeatherRefreshFailed
from plotplanner.models import WeatherMonthly, WeatherMonthlyRead
from plotplanner.services.open_meteo import OpenMeteoArchiveClient
from plotplanner.services.rate_limiter import InMemoryRateLimiter
from plotplanner.services.weather import WeatherService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plans", tags=["weather"])


class WeatherRefreshCommand(BaseModel):
    force: bool = False


class WeatherMonthlyList(BaseModel):
    data: list[WeatherMonthlyRead]


class WeatherRefreshData(BaseModel):
    refreshed: bool
    months: int
    rows: list[WeatherMonthlyRead]


class WeatherRefreshResponse(BaseModel):
    data: WeatherRefreshData


def _read_rows(rows: list[WeatherMonthly]) -> list[WeatherMonthlyRead]:
    return [WeatherMonthlyRead.model_validate(row, from_attributes=True) for row in rows]


@router.get("/{plan_id}/weather", response_model=WeatherMonthlyList)
def get_plan_weather(
    plan_id: uuid.UUID,
    session: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
    limiter: InMemoryRateLimiter = Depends(get_weather_limiter),
) -> Union[WeatherMonthlyList, JSONResponse]:
    service = WeatherService(session, limiter)
    try:
        rows = service.get_monthly(plan_id, user_id)
    except WeatherRefreshFailed as exc:
        log_api_error(exc, "/plans/{plan_id}/weather", "GET", str(user_id), {"plan_id": str(plan_id)})
        return weather_error_response(exc.error)
    return WeatherMonthlyList(data=_read_rows(rows))


@router.post("/{plan_id}/weather/refresh", response_model=WeatherRefreshResponse)
async def refresh_plan_weather(
    plan_id: uuid.UUID,
    command: Optional[WeatherRefreshCommand] = None,
    session: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
    limiter: InMemoryRateLimiter = Depends(get_weather_limiter),
    archive: OpenMeteoArchiveClient = Depends(get_archive_client),
) -> Union[WeatherRefreshResponse, JSONResponse]:
    """Refresh the plan's climate cache when it is stale or ``force`` is set.

    The per-plan throttle applies to forced refreshes as well.
    """

    force = command.force if command else False
    params = {"plan_id": str(plan_id), "force": force}
    service = WeatherService(session, limiter, archive)
    try:
        result = await service.refresh(plan_id, user_id, force=force)
    except WeatherRefreshFailed as exc:
        log_api_error(exc, "/plans/{plan_id}/weather/refresh", "POST", str(user_id), params)
        return weather_error_response(exc.error)
    except Exception as exc:
        log_api_error(exc, "/plans/{plan_id}/weather/refresh", "POST", str(user_id), params)
        return weather_error_response(InternalError())

    return WeatherRefreshResponse(
        data=WeatherRefreshData(refreshed=result.refreshed, months=result.months, rows=_read_rows(result.rows))
    )


__all__ = ["router"]
