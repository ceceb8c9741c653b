"""Chart data for the drinking trends and sobriety views."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Protocol

import httpx

from sober_ui.domain.analytics import DrinkStatsPeriod, DrinkStatsPoint, MonthlyBACStats
from sober_ui.domain.errors import ApiError, UnauthorizedError

DECEMBER = 12
TRENDS_DAYS = 90
DASHBOARD_MONTHS = 6

logger = logging.getLogger(__name__)


class AnalyticsClient(Protocol):
    """API operations used by the analytics views."""

    async def get_drink_stats(
        self,
        period: DrinkStatsPeriod,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[DrinkStatsPoint]:
        """Return drink totals grouped by period."""

    async def get_monthly_bac_stats(
        self, start_date: date | None = None, end_date: date | None = None
    ) -> list[MonthlyBACStats]:
        """Return monthly sober/light/heavy day counts."""


@dataclass(frozen=True)
class TrendPoint:
    """Drink totals for one calendar day."""

    date: date
    drink_count: int
    total_standard_drinks: float


@dataclass(frozen=True)
class MonthSummary:
    """Sober, light and heavy drinking days in a month."""

    label: str
    sober: int
    light: int
    heavy: int
    sober_percentage: float


@dataclass
class SobrietyDashboard:
    """Monthly summaries and the change in sober percentage."""

    months: list[MonthSummary]
    trend: float | None


@dataclass(frozen=True)
class SobrietyStats:
    """Sober days in the latest month."""

    month_label: str
    sober_days: int
    sober_percentage: float


@dataclass
class AnalyticsService:
    """Service shaping backend analytics into chart series."""

    client: AnalyticsClient
    tz: tzinfo | None = None

    async def get_drinking_trends(
        self, days: int = TRENDS_DAYS, today: date | None = None
    ) -> list[TrendPoint]:
        """Return daily drink totals with missing days filled with zeros."""
        end = today or self._today()
        start = end - timedelta(days=days)
        try:
            stats = await self.client.get_drink_stats("daily", start, end)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to fetch drink stats")
            return []
        return fill_daily_gaps(stats)

    async def get_sobriety_dashboard(
        self, months: int = DASHBOARD_MONTHS, today: date | None = None
    ) -> SobrietyDashboard:
        """Return monthly sobriety summaries for the last few months."""
        end = today or self._today()
        stats = await self._monthly_stats(_months_before(end, months), end)
        summaries = [_summarize_month(item) for item in stats]
        trend = None
        if len(summaries) >= 2:  # noqa: PLR2004
            trend = summaries[-1].sober_percentage - summaries[-2].sober_percentage
        return SobrietyDashboard(months=summaries, trend=trend)

    async def get_sobriety_stats(self, today: date | None = None) -> SobrietyStats:
        """Return sober days for the latest month."""
        end = today or self._today()
        stats = await self._monthly_stats(_months_before(end, 1), end)
        if not stats:
            return SobrietyStats(month_label="", sober_days=0, sober_percentage=0)
        latest = stats[-1]
        sober = latest.counts.get("sober", 0)
        return SobrietyStats(
            month_label=_month_label(latest),
            sober_days=sober,
            sober_percentage=sober / (latest.total or 1) * 100,
        )

    async def _monthly_stats(self, start: date, end: date) -> list[MonthlyBACStats]:
        try:
            return await self.client.get_monthly_bac_stats(start, end)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to fetch monthly BAC stats")
            return []

    def _today(self) -> date:
        return datetime.now(tz=self.tz).date()


def fill_daily_gaps(stats: list[DrinkStatsPoint]) -> list[TrendPoint]:
    """Return one point per day between the first and last reported day."""
    by_day: dict[date, DrinkStatsPoint] = {}
    for point in stats:
        try:
            day = date.fromisoformat(point.time_period[:10])
        except ValueError:
            logger.debug("Skipping drink stats period: %s", point.time_period)
            continue
        by_day[day] = point
    if not by_day:
        return []

    first, last = min(by_day), max(by_day)
    filled = []
    for offset in range((last - first).days + 1):
        day = first + timedelta(days=offset)
        point = by_day.get(day)
        filled.append(
            TrendPoint(
                date=day,
                drink_count=point.drink_count if point else 0,
                total_standard_drinks=point.total_standard_drinks if point else 0,
            )
        )
    return filled


def _summarize_month(stats: MonthlyBACStats) -> MonthSummary:
    sober = stats.counts.get("sober", 0)
    return MonthSummary(
        label=_month_label(stats),
        sober=sober,
        light=stats.counts.get("light", 0),
        heavy=stats.counts.get("heavy", 0),
        sober_percentage=sober / stats.total * 100 if stats.total else 0,
    )


def _month_label(stats: MonthlyBACStats) -> str:
    try:
        return date(stats.year, stats.month, 1).strftime("%B %Y")
    except ValueError:
        return f"{stats.year}-{stats.month:02d}"


def _months_before(day: date, months: int) -> date:
    """Return the same day ``months`` earlier, clamped to the month's end."""
    month_index = day.year * DECEMBER + day.month - 1 - months
    year, month = divmod(month_index, DECEMBER)
    month += 1
    for candidate in range(day.day, 0, -1):
        try:
            return date(year, month, candidate)
        except ValueError:
            continue
    return date(year, month, 1)
