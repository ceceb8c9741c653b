"""Drink log store: paginated fetching, grouping by day and daily stats."""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Protocol

import httpx

from sober_ui.domain.drink_logs import DailyStats, DrinkLog
from sober_ui.domain.errors import ApiError, UnauthorizedError

PAGE_SIZE = 10
DATE_KEY_FORMAT = "%Y-%m-%d"

logger = logging.getLogger(__name__)


class DrinkLogSource(Protocol):
    """Paginated source of drink logs."""

    async def get_drink_logs(
        self, page: int, page_size: int, **filters: object
    ) -> list[DrinkLog]:
        """Return one page of drink logs."""


@dataclass
class DrinkLogStore:
    """Holds the drink logs loaded in this session and derives daily summaries.

    Every request is tagged with the current sequence number. ``refresh``
    bumps the sequence, so any response that arrives for an older sequence
    is discarded instead of overwriting newer state. ``fetch_more`` is a
    no-op while another request is in flight.
    """

    source: DrinkLogSource
    page_size: int = PAGE_SIZE
    tz: tzinfo | None = None
    drink_logs: list[DrinkLog] = field(default_factory=list)
    current_page: int = 1
    has_more_logs: bool = True
    _sequence: int = 0
    _refreshes_in_flight: int = 0
    _fetching_more: bool = False

    async def refresh_drink_logs(self) -> None:
        """Replace the collection with the first page of logs."""
        self._sequence += 1
        sequence = self._sequence
        self._refreshes_in_flight += 1
        try:
            page = await self.source.get_drink_logs(page=1, page_size=self.page_size)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to fetch drink logs")
            if sequence == self._sequence:
                self.drink_logs = []
                self.current_page = 1
                self.has_more_logs = False
            return
        finally:
            self._refreshes_in_flight -= 1

        if sequence != self._sequence:
            logger.debug("Discarding superseded drink log refresh")
            return
        self.drink_logs = list(page)
        self.current_page = 1
        self.has_more_logs = len(page) == self.page_size

    async def fetch_more_drink_logs(self) -> list[DrinkLog]:
        """Append the next page of logs and return it.

        A store that has never been refreshed loads the first page instead.
        """
        if self._fetching_more or self._refreshes_in_flight:
            logger.debug("Drink log request already in flight, skipping fetch")
            return []
        if not self.loaded:
            logger.debug("Drink logs not loaded yet, fetching the first page")
            await self.refresh_drink_logs()
            return list(self.drink_logs)
        sequence = self._sequence
        next_page = self.current_page + 1
        self._fetching_more = True
        try:
            page = await self.source.get_drink_logs(
                page=next_page, page_size=self.page_size
            )
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception(
                "Failed to fetch more drink logs", extra={"page": next_page}
            )
            if sequence == self._sequence:
                self.has_more_logs = False
            return []
        finally:
            self._fetching_more = False

        if sequence != self._sequence:
            logger.debug("Discarding drink log page fetched before a refresh")
            return []
        self.drink_logs = [*self.drink_logs, *page]
        self.current_page = next_page
        self.has_more_logs = len(page) == self.page_size
        return list(page)

    @property
    def loaded(self) -> bool:
        """Whether the first page has been requested in this store."""
        return self._sequence > 0

    @property
    def grouped_drinks(self) -> dict[str, list[DrinkLog]]:
        """Logs grouped by local calendar day, newest first."""
        return group_drinks_by_day(self.drink_logs, self.tz)

    @property
    def daily_stats(self) -> list[DailyStats]:
        """Per-day counts and standard drink totals, newest day first."""
        return compute_daily_stats(self.grouped_drinks)


def parse_timestamp(value: str, tz: tzinfo | None = None) -> datetime | None:
    """Parse an ISO timestamp into the display timezone.

    Naive timestamps are read as local time. Returns None when the value
    is not a valid timestamp.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = (
                parsed.replace(tzinfo=tz) if tz is not None else parsed.astimezone()
            )
        return parsed.astimezone(tz)
    except (ValueError, OverflowError):
        return None


def group_drinks_by_day(
    drink_logs: list[DrinkLog], tz: tzinfo | None = None
) -> dict[str, list[DrinkLog]]:
    """Partition logs by calendar day of ``logged_at``.

    Logs with an unparseable ``logged_at`` are dropped. Days and the logs
    within each day are ordered newest first; ties keep the received order.
    """
    timestamped: list[tuple[datetime, DrinkLog]] = []
    for drink in drink_logs:
        logged_at = parse_timestamp(drink.logged_at, tz)
        if logged_at is None:
            logger.debug("Skipping drink log with invalid timestamp: %s", drink.id)
            continue
        timestamped.append((logged_at, drink))
    timestamped.sort(key=lambda item: item[0], reverse=True)

    groups: dict[str, list[DrinkLog]] = {}
    for logged_at, drink in timestamped:
        groups.setdefault(logged_at.strftime(DATE_KEY_FORMAT), []).append(drink)
    return groups


def compute_daily_stats(groups: dict[str, list[DrinkLog]]) -> list[DailyStats]:
    """Summarize each day bucket, newest day first."""
    stats = [
        DailyStats(
            date=day,
            drinks=drinks,
            drink_count=len(drinks),
            standard_drinks=sum(
                (_standard_drinks(drink) for drink in drinks), start=0.0
            ),
        )
        for day, drinks in groups.items()
    ]
    return sorted(stats, key=lambda entry: entry.date, reverse=True)


def _standard_drinks(drink: DrinkLog) -> float:
    try:
        value = float(drink.standard_drinks)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return value
