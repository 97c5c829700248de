"""Monthly climate cache for plans, backed by the Open-Meteo archive."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Sequence

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from plotplanner.core.config import settings
from plotplanner.core.errors import (
    MissingLocation,
    NotFound,
    RateLimited,
    UpstreamError,
    WeatherRefreshFailed,
)
from plotplanner.db.session import translate_storage_error
from plotplanner.models import Plan, WeatherMonthly, utc_now
from plotplanner.services.climate_scale import (
    Celsius,
    Millimetres,
    clamp_percent,
    normalize_precipitation,
    normalize_sunlight,
    normalize_temperature,
    round_half_up,
)
from plotplanner.services.open_meteo import DailyClimateSample, OpenMeteoArchiveClient, last_12_months_range
from plotplanner.services.plans import PlanService
from plotplanner.services.rate_limiter import InMemoryRateLimiter

logger = logging.getLogger(__name__)

MAX_MONTHS = 12


@dataclass
class MonthlyAggregate:
    """Normalized (0-100) climate figures for one calendar month."""

    year: int
    month: int
    sunlight: int
    humidity: int
    precip: int
    temperature: int


@dataclass
class WeatherRefreshResult:
    refreshed: bool
    months: int
    rows: list[WeatherMonthly] = field(default_factory=list)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _present(values: Iterable[float | None]) -> list[float]:
    return [v for v in values if v is not None]


def aggregate_monthly(samples: Iterable[DailyClimateSample]) -> list[MonthlyAggregate]:
    """Bucket daily samples by calendar month, newest month first.

    Radiation, sunshine, humidity and temperature use the monthly mean of the
    daily values; precipitation uses the monthly total. Missing daily values
    are skipped.
    """

    buckets: dict[tuple[int, int], list[DailyClimateSample]] = defaultdict(list)
    for sample in samples:
        buckets[(sample.day.year, sample.day.month)].append(sample)

    aggregates: list[MonthlyAggregate] = []
    for (year, month), days in buckets.items():
        avg_radiation = _mean(_present(d.radiation_mj_m2 for d in days))
        avg_sunshine_hours = _mean(_present(d.sunshine_seconds for d in days)) / 3600
        avg_humidity = _mean(_present(d.humidity_pct for d in days))
        total_precip = Millimetres(sum(_present(d.precipitation_mm for d in days)))
        avg_temperature = Celsius(_mean(_present(d.temperature_c for d in days)))

        aggregates.append(
            MonthlyAggregate(
                year=year,
                month=month,
                sunlight=round_half_up(clamp_percent(normalize_sunlight(avg_radiation, avg_sunshine_hours))),
                humidity=round_half_up(clamp_percent(avg_humidity)),
                precip=round_half_up(clamp_percent(normalize_precipitation(total_precip))),
                temperature=round_half_up(clamp_percent(normalize_temperature(avg_temperature))),
            )
        )

    aggregates.sort(key=lambda agg: (agg.year, agg.month), reverse=True)
    return aggregates


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WeatherService:
    """Decide when a plan's cached climate rows need recomputing and do it."""

    def __init__(
        self,
        session: Session,
        limiter: InMemoryRateLimiter,
        archive: Optional[OpenMeteoArchiveClient] = None,
        now: Callable[[], datetime] = utc_now,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.session = session
        self.limiter = limiter
        self.archive = archive or OpenMeteoArchiveClient()
        self._now = now
        self._today = today
        self.stale_after = timedelta(days=max(1, settings.weather_stale_after_days))

    async def refresh(self, plan_id: uuid.UUID, user_id: uuid.UUID, force: bool = False) -> WeatherRefreshResult:
        key = str(plan_id)
        limit = self.limiter.status(key)
        if not limit.allowed:
            logger.info("Weather refresh for plan %s throttled (%ss left)", plan_id, limit.retry_after)
            raise WeatherRefreshFailed(RateLimited(retry_after_seconds=limit.retry_after or 1))

        plan = self._load_plan(plan_id, user_id)
        if plan is None:
            raise WeatherRefreshFailed(NotFound(plan_id=key))
        if not plan.has_location:
            raise WeatherRefreshFailed(MissingLocation(plan_id=key))

        if not force:
            cached = self._cached_rows(plan_id)
            if cached and not self._is_stale(cached):
                logger.debug("Weather cache for plan %s is fresh; skipping fetch", plan_id)
                return WeatherRefreshResult(refreshed=False, months=0, rows=cached)

        start_date, end_date = last_12_months_range(self._today())
        try:
            samples = await self.archive.fetch_daily(plan.latitude, plan.longitude, start_date, end_date)
            aggregates = aggregate_monthly(samples)[:MAX_MONTHS]
            if not aggregates:
                # An empty archive response must not wipe the cache.
                raise WeatherRefreshFailed(UpstreamError(detail="Open-Meteo returned no daily data"))
            rows = self._replace_rows(plan_id, aggregates)
        finally:
            # Failed fetches count against the window too.
            self.limiter.record(key)

        logger.info("Refreshed %d weather months for plan %s", len(rows), plan_id)
        return WeatherRefreshResult(refreshed=True, months=len(rows), rows=rows)

    def get_monthly(self, plan_id: uuid.UUID, user_id: uuid.UUID) -> list[WeatherMonthly]:
        """Return cached rows (newest first) for a plan owned by ``user_id``."""

        if self._load_plan(plan_id, user_id) is None:
            raise WeatherRefreshFailed(NotFound(plan_id=str(plan_id)))
        return self._cached_rows(plan_id)

    def _load_plan(self, plan_id: uuid.UUID, user_id: uuid.UUID) -> Plan | None:
        return PlanService(self.session).get_owned(plan_id, user_id)

    def _cached_rows(self, plan_id: uuid.UUID) -> list[WeatherMonthly]:
        stmt = (
            select(WeatherMonthly)
            .where(WeatherMonthly.plan_id == plan_id)
            .order_by(WeatherMonthly.year.desc(), WeatherMonthly.month.desc())
            .limit(MAX_MONTHS)
        )
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as exc:
            raise WeatherRefreshFailed(translate_storage_error(exc, str(plan_id))) from exc

    def _is_stale(self, rows: Sequence[WeatherMonthly]) -> bool:
        newest = max(_as_utc(row.last_refreshed_at) for row in rows)
        return _as_utc(self._now()) - newest > self.stale_after

    def _replace_rows(self, plan_id: uuid.UUID, aggregates: Sequence[MonthlyAggregate]) -> list[WeatherMonthly]:
        refreshed_at = self._now()
        rows = [
            WeatherMonthly(
                plan_id=plan_id,
                year=agg.year,
                month=agg.month,
                sunlight=agg.sunlight,
                humidity=agg.humidity,
                precip=agg.precip,
                temperature=agg.temperature,
                last_refreshed_at=refreshed_at,
            )
            for agg in aggregates
        ]
        try:
            self.session.exec(delete(WeatherMonthly).where(WeatherMonthly.plan_id == plan_id))
            self.session.add_all(rows)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise WeatherRefreshFailed(translate_storage_error(exc, str(plan_id))) from exc
        for row in rows:
            self.session.refresh(row)
        return rows


__all__ = ["MonthlyAggregate", "WeatherRefreshResult", "WeatherService", "aggregate_monthly"]
