"""Request context and response shapes exchanged with the AI provider."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr, field_validator


class PlantSearchCandidate(BaseModel):
    name: StrictStr = Field(min_length=1)
    latin_name: Optional[StrictStr] = None
    source: Literal["ai"]

    @field_validator("latin_name")
    @classmethod
    def blank_latin_name_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value


class PlantSearchResult(BaseModel):
    candidates: list[PlantSearchCandidate] = Field(max_length=5)


class PlantFitResult(BaseModel):
    """Scores are integers in [1, 5]; anything else fails validation."""

    sunlight_score: StrictInt = Field(ge=1, le=5)
    humidity_score: StrictInt = Field(ge=1, le=5)
    precip_score: StrictInt = Field(ge=1, le=5)
    overall_score: StrictInt = Field(ge=1, le=5)
    explanation: Optional[StrictStr] = None


class FitLocation(BaseModel):
    lat: float
    lon: float


class FitClimate(BaseModel):
    annual_temp_avg: float = Field(description="Mean monthly temperature in C")
    annual_precip: float = Field(description="Total yearly precipitation in mm")


class FitCell(BaseModel):
    x: int
    y: int


class MonthlyClimatePoint(BaseModel):
    year: int
    month: int
    sunlight: int
    humidity: int
    precip: int
    temperature: int  # 0-100 scale


class PlantFitContext(BaseModel):
    plant_name: str
    location: FitLocation
    orientation: int
    climate: FitClimate
    cell: FitCell
    weather_monthly: list[MonthlyClimatePoint] = Field(default_factory=list)


__all__ = [
    "FitCell",
    "FitClimate",
    "FitLocation",
    "MonthlyClimatePoint",
    "PlantFitContext",
    "PlantFitResult",
    "PlantSearchCandidate",
    "PlantSearchResult",
]
