"""Plot plan and grid cell models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GridCellType(str, Enum):
    soil = "soil"
    water = "water"
    path = "path"
    building = "building"
    blocked = "blocked"


class Plan(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(index=True, nullable=False)
    name: str = Field(max_length=100)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    orientation: int = Field(default=0, ge=0, le=359, description="Plot rotation in degrees, 0 = north")
    hemisphere: Optional[str] = Field(default=None, max_length=8)
    width_cm: int = Field(default=100)
    height_cm: int = Field(default=100)
    cell_size_cm: int = Field(default=25)
    grid_width: int = Field(default=4)
    grid_height: int = Field(default=4)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class GridCell(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("plan_id", "x", "y", name="uq_gridcell_plan_xy"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    plan_id: uuid.UUID = Field(foreign_key="plan.id", index=True, nullable=False)
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    type: GridCellType = Field(default=GridCellType.soil)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)


__all__ = ["GridCell", "GridCellType", "Plan", "utc_now"]
