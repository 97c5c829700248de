"""Cached monthly climate models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from .plan import utc_now


class WeatherMonthly(SQLModel, table=True):
    """One normalized climate row per plan and calendar month.

    All four metrics are on the 0-100 scale. Rows are replaced wholesale on
    refresh and at most twelve are kept per plan.
    """

    __table_args__ = (UniqueConstraint("plan_id", "year", "month", name="uq_weathermonthly_plan_month"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    plan_id: uuid.UUID = Field(foreign_key="plan.id", index=True, nullable=False)
    year: int
    month: int = Field(ge=1, le=12)
    sunlight: int = Field(ge=0, le=100)
    humidity: int = Field(ge=0, le=100)
    precip: int = Field(ge=0, le=100)
    temperature: int = Field(ge=0, le=100)
    last_refreshed_at: datetime = Field(
        default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False, index=True
    )


class WeatherMonthlyRead(BaseModel):
    year: int
    month: int
    sunlight: int
    humidity: int
    precip: int
    temperature: int
    last_refreshed_at: datetime


__all__ = ["WeatherMonthly", "WeatherMonthlyRead"]
