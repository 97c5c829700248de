"""
Shared fixtures for the plot planner test suite.

Settings are read at import time, so the environment is prepared before any
``plotplanner`` module is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENROUTER_API_KEY"] = "test-key"
os.environ["AI_USE_MOCK"] = "false"

import uuid
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from plotplanner.core.errors import WeatherRefreshFailed
from plotplanner.models import GridCell, GridCellType, Plan, WeatherMonthly
from plotplanner.services.open_meteo import DAILY_METRICS, DailyClimateSample
from plotplanner.services.rate_limiter import InMemoryRateLimiter

OWNER_ID = uuid.UUID("11111111-1111-4111-8111-111111111111")
STRANGER_ID = uuid.UUID("22222222-2222-4222-8222-222222222222")


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_daily_samples(start: date, end: date) -> list[DailyClimateSample]:
    """One sample per day with values that vary by calendar month."""

    samples = []
    day = start
    while day <= end:
        samples.append(
            DailyClimateSample(
                day=day,
                radiation_mj_m2=4.0 + day.month * 1.5,
                sunshine_seconds=3600.0 * (3 + day.month / 2),
                humidity_pct=90.0 - day.month * 2,
                precipitation_mm=1.5 + (day.month % 4),
                temperature_c=-4.0 + day.month * 2.2,
            )
        )
        day += timedelta(days=1)
    return samples


def archive_payload(start: date, days: int) -> dict:
    """Open-Meteo archive body with ``days`` consecutive entries from ``start``."""

    times = [(start + timedelta(days=i)).isoformat() for i in range(days)]
    return {
        "latitude": 52.0,
        "longitude": 21.0,
        "timezone": "Europe/Warsaw",
        "daily": {
            "time": times,
            "shortwave_radiation_sum": [12.5] * days,
            "sunshine_duration": [28_800.0] * days,
            "relative_humidity_2m_mean": [71.0] * days,
            "precipitation_sum": [1.2] * days,
            "temperature_2m_mean": [8.4] * days,
        },
        "daily_units": {metric: "" for metric in DAILY_METRICS},
    }


class FakeArchive:
    """Stand-in for ``OpenMeteoArchiveClient`` that records every call."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls: list[tuple[float, float, str, str]] = []

    async def fetch_daily(self, latitude, longitude, start_date, end_date, timeout_ms=None):
        self.calls.append((latitude, longitude, start_date, end_date))
        if self.error is not None:
            raise self.error
        return make_daily_samples(date.fromisoformat(start_date), date.fromisoformat(end_date))


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(window_seconds=900, cleanup_interval_seconds=3600, clock=clock)


@pytest.fixture
def archive() -> FakeArchive:
    return FakeArchive()


@pytest.fixture
def plan_factory(session) -> Callable[..., Plan]:
    def _create(**overrides) -> Plan:
        values = {
            "user_id": OWNER_ID,
            "name": "Back garden",
            "latitude": 52.0,
            "longitude": 21.0,
            "orientation": 180,
            "grid_width": 4,
            "grid_height": 4,
        }
        values.update(overrides)
        plan = Plan(**values)
        session.add(plan)
        session.commit()
        session.refresh(plan)
        return plan

    return _create


@pytest.fixture
def cell_factory(session) -> Callable[..., GridCell]:
    def _create(plan: Plan, x: int, y: int, type: GridCellType = GridCellType.soil) -> GridCell:
        cell = GridCell(plan_id=plan.id, x=x, y=y, type=type)
        session.add(cell)
        session.commit()
        session.refresh(cell)
        return cell

    return _create


@pytest.fixture
def weather_rows(session) -> Callable[..., list[WeatherMonthly]]:
    """Persist cached monthly rows for a plan, newest month first."""

    def _create(plan: Plan, months: int, refreshed_at: datetime, newest: tuple[int, int] = (2026, 9)):
        year, month = newest
        rows = []
        for offset in range(months):
            index = year * 12 + (month - 1) - offset
            rows.append(
                WeatherMonthly(
                    plan_id=plan.id,
                    year=index // 12,
                    month=index % 12 + 1,
                    sunlight=40 + offset,
                    humidity=70,
                    precip=20,
                    temperature=50,
                    last_refreshed_at=refreshed_at,
                )
            )
        session.add_all(rows)
        session.commit()
        return rows

    return _create


def weather_error_kind(exc_info: pytest.ExceptionInfo) -> str:
    assert isinstance(exc_info.value, WeatherRefreshFailed)
    return exc_info.value.error.kind
