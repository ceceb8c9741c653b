"""BAC views: current estimate and the timeline chart."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Protocol

import httpx

from sober_ui.domain.bac import BACTimeline, CurrentBAC
from sober_ui.domain.errors import ApiError, UnauthorizedError
from sober_ui.services.drink_logs import parse_timestamp
from sober_ui.services.profile import ProfileService

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_GENDER = "male"
TIMELINE_HOURS_BEFORE = 2
TIMELINE_HOURS_AFTER = 4
TIMELINE_STEP_MINUTES = 2
STILL_DRINKING = "Still drinking"

logger = logging.getLogger(__name__)


class BacClient(Protocol):
    """API operations used by the BAC views."""

    async def get_current_bac(self, weight_kg: float, gender: str) -> CurrentBAC:
        """Return the current BAC estimate."""

    async def get_bac_timeline(  # noqa: PLR0913
        self,
        start_time: datetime,
        end_time: datetime,
        weight_kg: float,
        gender: str,
        time_step_mins: int,
    ) -> BACTimeline:
        """Return a BAC timeline."""


@dataclass(frozen=True)
class ChartPoint:
    """A BAC value labelled with its local clock time."""

    time: str
    bac: float


@dataclass(frozen=True)
class BacTimelineView:
    """Chart series and headline figures for the BAC timeline."""

    points: list[ChartPoint]
    max_bac: float
    drinking_since: str | None
    sober_since: str


@dataclass
class BacService:
    """Service building the BAC views."""

    client: BacClient
    profile_service: ProfileService
    tz: tzinfo | None = None

    async def get_current(self) -> CurrentBAC | None:
        """Return the current BAC for the user's profile."""
        weight_kg, gender = await self._body_profile()
        try:
            return await self.client.get_current_bac(weight_kg, gender)
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to fetch current BAC")
            return None

    async def get_timeline(self, now: datetime | None = None) -> BacTimelineView | None:
        """Return the BAC timeline from two hours ago to four hours ahead."""
        current = now or datetime.now(tz=self.tz)
        weight_kg, gender = await self._body_profile()
        try:
            timeline = await self.client.get_bac_timeline(
                start_time=current - timedelta(hours=TIMELINE_HOURS_BEFORE),
                end_time=current + timedelta(hours=TIMELINE_HOURS_AFTER),
                weight_kg=weight_kg,
                gender=gender,
                time_step_mins=TIMELINE_STEP_MINUTES,
            )
        except UnauthorizedError:
            raise
        except (ApiError, httpx.HTTPError):
            logger.exception("Failed to fetch BAC timeline")
            return None

        points = []
        for point in timeline.timeline:
            label = self._clock(point.time)
            if label is None:
                continue
            points.append(ChartPoint(time=label, bac=point.bac))
        summary = timeline.summary
        return BacTimelineView(
            points=points,
            max_bac=summary.max_bac,
            drinking_since=self._clock(summary.drinking_since_time),
            sober_since=self._clock(summary.sober_since_time) or STILL_DRINKING,
        )

    async def _body_profile(self) -> tuple[float, str]:
        profile = await self.profile_service.get_profile()
        if profile is None or profile.weight_kg <= 0:
            return DEFAULT_WEIGHT_KG, DEFAULT_GENDER
        return profile.weight_kg, profile.gender

    def _clock(self, value: str | None) -> str | None:
        parsed = parse_timestamp(value or "", self.tz)
        if parsed is None:
            return None
        return parsed.strftime("%H:%M")
