"""Database models."""

from .plan import GridCell, GridCellType, Plan, utc_now
from .weather import WeatherMonthly, WeatherMonthlyRead

__all__ = [
    "GridCell",
    "GridCellType",
    "Plan",
    "WeatherMonthly",
    "WeatherMonthlyRead",
    "utc_now",
]
