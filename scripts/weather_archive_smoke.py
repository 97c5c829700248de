"""Fetch and aggregate a trailing year of climate data for one coordinate."""

from __future__ import annotations

import argparse
import asyncio

from plotplanner.core.errors import WeatherRefreshFailed
from plotplanner.core.logging_config import setup_logging
from plotplanner.services.open_meteo import OpenMeteoArchiveClient, last_12_months_range
from plotplanner.services.weather import aggregate_monthly


async def _run(lat: float, lon: float, timeout_ms: int) -> int:
    start, end = last_12_months_range()
    client = OpenMeteoArchiveClient(timeout_ms=timeout_ms)
    try:
        samples = await client.fetch_daily(lat, lon, start, end)
    except WeatherRefreshFailed as exc:
        print(f"Fetch failed ({exc.error.kind}): {exc}")
        return 1

    print(f"{len(samples)} daily samples for {start}..{end}")
    print("year-month  sun  hum  precip  temp")
    for agg in aggregate_monthly(samples)[:12]:
        print(
            f"{agg.year}-{agg.month:02d}    {agg.sunlight:>3}  {agg.humidity:>3}  "
            f"{agg.precip:>6}  {agg.temperature:>4}"
        )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test the Open-Meteo archive client.")
    parser.add_argument("--lat", type=float, default=52.0, help="Latitude (default 52.0).")
    parser.add_argument("--lon", type=float, default=21.0, help="Longitude (default 21.0).")
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=10_000,
        help="Request budget in milliseconds (the API default is much tighter).",
    )
    args = parser.parse_args()

    setup_logging("weather-smoke")
    raise SystemExit(asyncio.run(_run(args.lat, args.lon, args.timeout_ms)))


if __name__ == "__main__":
    main()
