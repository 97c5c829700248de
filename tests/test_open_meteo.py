"""Tests for the Open-Meteo archive client."""

from datetime import date

import httpx
import pytest
import respx
from conftest import archive_payload, weather_error_kind

from plotplanner.core.errors import WeatherRefreshFailed
from plotplanner.services.open_meteo import DAILY_METRICS, OpenMeteoArchiveClient, last_12_months_range

ARCHIVE_URL = "https://archive.test/v1/archive"


@pytest.fixture
def client() -> OpenMeteoArchiveClient:
    return OpenMeteoArchiveClient(base_url=ARCHIVE_URL, timeout_ms=1200)


def test_window_ends_five_days_before_today():
    assert last_12_months_range(date(2024, 3, 20)) == ("2023-03-15", "2024-03-15")


def test_window_handles_month_end_and_leap_years():
    # 2024-03-05 minus 5 days is 2024-02-29; a year earlier has no 29th.
    assert last_12_months_range(date(2024, 3, 5)) == ("2023-02-28", "2024-02-29")
    assert last_12_months_range(date(2025, 1, 3), lag_days=0) == ("2024-01-03", "2025-01-03")


@pytest.mark.asyncio
async def test_fetch_daily_parses_samples_and_sends_query(client):
    with respx.mock(assert_all_called=True) as mock:
        route = mock.get(ARCHIVE_URL).mock(
            return_value=httpx.Response(200, json=archive_payload(date(2025, 10, 14), 3))
        )
        samples = await client.fetch_daily(52.0, 21.0, "2025-10-14", "2025-10-16")

    assert [s.day for s in samples] == [date(2025, 10, 14), date(2025, 10, 15), date(2025, 10, 16)]
    assert samples[0].radiation_mj_m2 == 12.5
    assert samples[0].sunshine_seconds == 28_800.0
    assert samples[0].humidity_pct == 71.0
    assert samples[0].precipitation_mm == 1.2
    assert samples[0].temperature_c == 8.4

    params = route.calls.last.request.url.params
    assert params["latitude"] == "52.0"
    assert params["longitude"] == "21.0"
    assert params["start_date"] == "2025-10-14"
    assert params["end_date"] == "2025-10-16"
    assert params["daily"] == ",".join(DAILY_METRICS)
    assert params["timezone"] == "auto"


@pytest.mark.asyncio
async def test_null_values_become_none(client):
    payload = archive_payload(date(2025, 1, 1), 2)
    payload["daily"]["sunshine_duration"] = [None, 3600]

    with respx.mock:
        respx.get(ARCHIVE_URL).mock(return_value=httpx.Response(200, json=payload))
        samples = await client.fetch_daily(52.0, 21.0, "2025-01-01", "2025-01-02")

    assert samples[0].sunshine_seconds is None
    assert samples[1].sunshine_seconds == 3600.0


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", DAILY_METRICS)
async def test_missing_metric_fails_whole_fetch(client, missing):
    payload = archive_payload(date(2025, 1, 1), 4)
    del payload["daily"][missing]

    with respx.mock:
        respx.get(ARCHIVE_URL).mock(return_value=httpx.Response(200, json=payload))
        with pytest.raises(WeatherRefreshFailed) as exc_info:
            await client.fetch_daily(52.0, 21.0, "2025-01-01", "2025-01-04")

    assert weather_error_kind(exc_info) == "upstream_error"
    assert missing in exc_info.value.error.message


@pytest.mark.asyncio
async def test_length_mismatch_is_rejected(client):
    payload = archive_payload(date(2025, 1, 1), 4)
    payload["daily"]["precipitation_sum"] = [0.0, 1.0, 2.0]

    with respx.mock:
        respx.get(ARCHIVE_URL).mock(return_value=httpx.Response(200, json=payload))
        with pytest.raises(WeatherRefreshFailed) as exc_info:
            await client.fetch_daily(52.0, 21.0, "2025-01-01", "2025-01-04")

    assert weather_error_kind(exc_info) == "upstream_error"
    assert "precipitation_sum" in exc_info.value.error.message


@pytest.mark.asyncio
async def test_missing_daily_time_is_rejected(client):
    with respx.mock:
        respx.get(ARCHIVE_URL).mock(return_value=httpx.Response(200, json={"daily": {}}))
        with pytest.raises(WeatherRefreshFailed) as exc_info:
            await client.fetch_daily(52.0, 21.0, "2025-01-01", "2025-01-04")

    assert "daily.time" in exc_info.value.error.message


@pytest.mark.asyncio
async def test_non_2xx_carries_status_and_body(client):
    with respx.mock:
        respx.get(ARCHIVE_URL).mock(return_value=httpx.Response(400, text="Parameter 'start_date' is out of range"))
        with pytest.raises(WeatherRefreshFailed) as exc_info:
            await client.fetch_daily(52.0, 21.0, "1900-01-01", "1900-01-04")

    error = exc_info.value.error
    assert error.kind == "upstream_error"
    assert error.status_code == 400
    assert error.message == "Open-Meteo API returned 400: Parameter 'start_date' is out of range"


@pytest.mark.asyncio
async def test_timeout_is_reported_distinctly(client):
    with respx.mock:
        respx.get(ARCHIVE_URL).mock(side_effect=httpx.ReadTimeout("timed out"))
        with pytest.raises(WeatherRefreshFailed) as exc_info:
            await client.fetch_daily(52.0, 21.0, "2025-01-01", "2025-01-04")

    assert weather_error_kind(exc_info) == "upstream_timeout"


@pytest.mark.asyncio
async def test_connection_failure_is_upstream_error(client):
    with respx.mock:
        respx.get(ARCHIVE_URL).mock(side_effect=httpx.ConnectError("connection refused"))
        with pytest.raises(WeatherRefreshFailed) as exc_info:
            await client.fetch_daily(52.0, 21.0, "2025-01-01", "2025-01-04")

    error = exc_info.value.error
    assert error.kind == "upstream_error"
    assert error.status_code is None
    assert "connection refused" in error.message


@pytest.mark.asyncio
async def test_invalid_json_is_upstream_error(client):
    with respx.mock:
        respx.get(ARCHIVE_URL).mock(return_value=httpx.Response(200, text="<html>maintenance</html>"))
        with pytest.raises(WeatherRefreshFailed) as exc_info:
            await client.fetch_daily(52.0, 21.0, "2025-01-01", "2025-01-04")

    assert weather_error_kind(exc_info) == "upstream_error"
