"""Domain models for drinking analytics."""

from dataclasses import dataclass
from typing import Literal

DrinkStatsPeriod = Literal["daily", "weekly", "monthly", "yearly"]
BAC_CATEGORIES = ("sober", "light", "heavy")


@dataclass(frozen=True)
class DrinkStatsPoint:
    """Drink totals for a single time period."""

    time_period: str
    drink_count: int
    total_standard_drinks: float


@dataclass(frozen=True)
class MonthlyBACStats:
    """Count of sober, light and heavy days in a month."""

    year: int
    month: int
    counts: dict[str, int]
    total: int
