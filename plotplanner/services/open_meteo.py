"""Open-Meteo historical archive client.

API: https://archive-api.open-meteo.com/v1/archive

One GET returns the five daily series used for plot climate profiles:

- shortwave_radiation_sum (MJ/m2)
- sunshine_duration (seconds)
- relative_humidity_2m_mean (%)
- precipitation_sum (mm)
- temperature_2m_mean (C)

The archive lags real time by a few days, so the trailing window ends
``lag_days`` before today. No retries happen here; callers decide.
"""

from __future__ import annotations

import asyncio
import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

import httpx

from plotplanner.core.config import settings
from plotplanner.core.errors import UpstreamError, UpstreamTimeout, WeatherRefreshFailed

logger = logging.getLogger(__name__)

DAILY_METRICS: tuple[str, ...] = (
    "shortwave_radiation_sum",
    "sunshine_duration",
    "relative_humidity_2m_mean",
    "precipitation_sum",
    "temperature_2m_mean",
)


@dataclass
class DailyClimateSample:
    """Raw physical-unit measurements for one calendar day."""

    day: date
    radiation_mj_m2: float | None = None
    sunshine_seconds: float | None = None
    humidity_pct: float | None = None
    precipitation_mm: float | None = None
    temperature_c: float | None = None


def _subtract_months(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def last_12_months_range(today: Optional[date] = None, lag_days: Optional[int] = None) -> tuple[str, str]:
    """Return ``(start_date, end_date)`` as ISO strings for the trailing year."""

    today = today or date.today()
    lag = settings.weather_archive_lag_days if lag_days is None else lag_days
    end = today - timedelta(days=lag)
    start = _subtract_months(end, 12)
    return start.isoformat(), end.isoformat()


class OpenMeteoArchiveClient:
    """Fetch daily climate series from the Open-Meteo archive."""

    def __init__(self, base_url: Optional[str] = None, timeout_ms: Optional[int] = None) -> None:
        self.base_url = base_url or settings.open_meteo_archive_url
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.weather_fetch_timeout_ms

    async def fetch_daily(
        self,
        latitude: float,
        longitude: float,
        start_date: str,
        end_date: str,
        timeout_ms: Optional[int] = None,
    ) -> list[DailyClimateSample]:
        budget = (timeout_ms if timeout_ms is not None else self.timeout_ms) / 1000.0
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "start_date": start_date,
            "end_date": end_date,
            "daily": ",".join(DAILY_METRICS),
            "timezone": "auto",
        }
        logger.info(
            "Fetching Open-Meteo archive %s..%s for lat=%s, lon=%s", start_date, end_date, latitude, longitude
        )
        try:
            payload = await asyncio.wait_for(self._get_json(params, budget), timeout=budget)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning("Open-Meteo archive timed out after %.1fs", budget)
            raise WeatherRefreshFailed(UpstreamTimeout()) from exc
        except httpx.HTTPError as exc:
            logger.warning("Open-Meteo archive request failed: %s", exc, exc_info=True)
            raise WeatherRefreshFailed(UpstreamError(detail=f"Failed to fetch from Open-Meteo: {exc}")) from exc

        samples = self._parse_daily(payload)
        logger.debug("Open-Meteo archive returned %d days", len(samples))
        return samples

    async def _get_json(self, params: dict[str, Any], budget: float) -> Any:
        headers = {"Accept": "application/json", "User-Agent": f"{settings.app_name}/{settings.app_version}"}
        async with httpx.AsyncClient(timeout=budget) as client:
            response = await client.get(self.base_url, params=params, headers=headers)
        if response.status_code >= 400:
            logger.warning("Open-Meteo error response: %s %s", response.status_code, response.text[:500])
            raise WeatherRefreshFailed(
                UpstreamError(
                    detail=f"Open-Meteo API returned {response.status_code}: {response.text}",
                    status_code=response.status_code,
                )
            )
        try:
            return response.json()
        except ValueError as exc:
            raise WeatherRefreshFailed(
                UpstreamError(detail=f"Open-Meteo API returned invalid JSON: {exc}")
            ) from exc

    def _parse_daily(self, payload: Any) -> list[DailyClimateSample]:
        daily = payload.get("daily") if isinstance(payload, dict) else None
        times = daily.get("time") if isinstance(daily, dict) else None
        if not isinstance(times, list):
            raise WeatherRefreshFailed(
                UpstreamError(detail="Invalid response structure from Open-Meteo API: missing daily.time")
            )

        series: dict[str, list[Any]] = {}
        for field in DAILY_METRICS:
            values = daily.get(field)
            if not isinstance(values, list) or len(values) != len(times):
                raise WeatherRefreshFailed(
                    UpstreamError(detail=f"Missing or invalid field in Open-Meteo response: {field}")
                )
            series[field] = values

        samples: list[DailyClimateSample] = []
        for idx, raw_day in enumerate(times):
            try:
                day = date.fromisoformat(str(raw_day))
            except ValueError as exc:
                raise WeatherRefreshFailed(
                    UpstreamError(detail=f"Invalid date in Open-Meteo response: {raw_day!r}")
                ) from exc
            samples.append(
                DailyClimateSample(
                    day=day,
                    radiation_mj_m2=self._coerce_float(series["shortwave_radiation_sum"][idx]),
                    sunshine_seconds=self._coerce_float(series["sunshine_duration"][idx]),
                    humidity_pct=self._coerce_float(series["relative_humidity_2m_mean"][idx]),
                    precipitation_mm=self._coerce_float(series["precipitation_sum"][idx]),
                    temperature_c=self._coerce_float(series["temperature_2m_mean"][idx]),
                )
            )
        return samples

    def _coerce_float(self, value: Any) -> float | None:
        try:
            if value is None:
                return None
            return float(value)
        except (TypeError, ValueError):
            return None


__all__ = ["DAILY_METRICS", "DailyClimateSample", "OpenMeteoArchiveClient", "last_12_months_range"]
