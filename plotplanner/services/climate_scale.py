"""Conversions between physical climate units and the 0-100 presentation scale."""

from __future__ import annotations

import math
from typing import NewType, Optional

NormalizedPercent = NewType("NormalizedPercent", float)
Celsius = NewType("Celsius", float)
Millimetres = NewType("Millimetres", float)

TEMPERATURE_MIN_C = -30.0
TEMPERATURE_SPAN_C = 80.0  # -30 C .. +50 C
RADIATION_MAX_MJ_M2 = 30.0
SUNSHINE_MAX_HOURS = 16.0
PRECIP_MAX_MM_MONTH = 300.0
SUNLIGHT_RADIATION_WEIGHT = 0.6
SUNLIGHT_SUNSHINE_WEIGHT = 0.4


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def clamp_percent(value: float) -> NormalizedPercent:
    return NormalizedPercent(min(max(value, 0.0), 100.0))


def normalize_temperature(celsius: Celsius) -> NormalizedPercent:
    return NormalizedPercent((celsius - TEMPERATURE_MIN_C) / TEMPERATURE_SPAN_C * 100)


def denormalize_temperature(normalized: NormalizedPercent) -> Celsius:
    """Map a 0-100 value back to degrees Celsius.

    Out-of-range input is extrapolated linearly; no validation happens here.
    """
    return Celsius((normalized / 100) * TEMPERATURE_SPAN_C + TEMPERATURE_MIN_C)


def denormalize_temperature_nullable(normalized: Optional[NormalizedPercent]) -> Optional[int]:
    if normalized is None:
        return None
    return round_half_up(denormalize_temperature(normalized))


def normalize_radiation(mj_per_m2: float) -> NormalizedPercent:
    return NormalizedPercent(min(mj_per_m2 / RADIATION_MAX_MJ_M2 * 100, 100.0))


def normalize_sunshine(hours: float) -> NormalizedPercent:
    return NormalizedPercent(min(hours / SUNSHINE_MAX_HOURS * 100, 100.0))


def normalize_sunlight(mj_per_m2: float, sunshine_hours: float) -> NormalizedPercent:
    blended = (
        normalize_radiation(mj_per_m2) * SUNLIGHT_RADIATION_WEIGHT
        + normalize_sunshine(sunshine_hours) * SUNLIGHT_SUNSHINE_WEIGHT
    )
    return NormalizedPercent(blended)


def normalize_precipitation(total_mm: Millimetres) -> NormalizedPercent:
    return NormalizedPercent(min(total_mm / PRECIP_MAX_MM_MONTH * 100, 100.0))


def denormalize_precipitation(normalized: NormalizedPercent) -> Millimetres:
    return Millimetres(normalized / 100 * PRECIP_MAX_MM_MONTH)


__all__ = [
    "Celsius",
    "Millimetres",
    "NormalizedPercent",
    "clamp_percent",
    "denormalize_precipitation",
    "denormalize_temperature",
    "denormalize_temperature_nullable",
    "normalize_precipitation",
    "normalize_radiation",
    "normalize_sunlight",
    "normalize_sunshine",
    "normalize_temperature",
    "round_half_up",
]
