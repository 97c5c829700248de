"""Unit tests for the 0-100 climate scale conversions."""

import pytest

from plotplanner.services.climate_scale import (
    NormalizedPercent,
    clamp_percent,
    denormalize_precipitation,
    denormalize_temperature,
    denormalize_temperature_nullable,
    normalize_precipitation,
    normalize_sunlight,
    normalize_temperature,
    round_half_up,
)


@pytest.mark.parametrize(
    "normalized, celsius",
    [(0, -30.0), (100, 50.0), (50, 10.0), (37.5, 0.0), (-10, -38.0), (125, 70.0)],
)
def test_denormalize_temperature_is_linear(normalized, celsius):
    assert denormalize_temperature(NormalizedPercent(normalized)) == pytest.approx(celsius)


def test_denormalize_temperature_nullable():
    assert denormalize_temperature_nullable(None) is None
    assert denormalize_temperature_nullable(NormalizedPercent(0)) == -30
    # 51 -> 10.8 C
    assert denormalize_temperature_nullable(NormalizedPercent(51)) == 11
    # 75 -> 30 C exactly
    assert denormalize_temperature_nullable(NormalizedPercent(75)) == 30


def test_round_half_up_matches_js_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(0.49) == 0


def test_normalize_temperature_inverts_denormalize():
    for celsius in (-30.0, -4.2, 0.0, 18.7, 50.0):
        assert denormalize_temperature(normalize_temperature(celsius)) == pytest.approx(celsius)


def test_sunlight_blends_radiation_and_sunshine():
    # 15 MJ/m2 -> 50, 8 h -> 50
    assert normalize_sunlight(15.0, 8.0) == pytest.approx(50.0)
    # both capped at 100 before weighting
    assert normalize_sunlight(60.0, 24.0) == pytest.approx(100.0)
    assert normalize_sunlight(30.0, 0.0) == pytest.approx(60.0)


def test_precipitation_scale_caps_at_300mm():
    assert normalize_precipitation(150.0) == pytest.approx(50.0)
    assert normalize_precipitation(900.0) == pytest.approx(100.0)
    assert denormalize_precipitation(NormalizedPercent(50)) == pytest.approx(150.0)


def test_clamp_percent():
    assert clamp_percent(-3.0) == 0.0
    assert clamp_percent(104.2) == 100.0
    assert clamp_percent(42.0) == 42.0
