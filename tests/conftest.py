"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime

import pytest

from sober_ui.adapters.sober_api_client import SoberApiClient
from sober_ui.adapters.token_store import InMemoryTokenStore, TokenStore
from sober_ui.config import Settings
from sober_ui.containers import AppContainer, build_user_session
from sober_ui.domain.analytics import DrinkStatsPeriod, DrinkStatsPoint, MonthlyBACStats
from sober_ui.domain.bac import BACPoint, BACSummary, BACTimeline, CurrentBAC
from sober_ui.domain.drink_logs import DrinkLog, DrinkTemplate, ParsedDrink
from sober_ui.domain.errors import ApiError, UnauthorizedError
from sober_ui.domain.users import CurrentUser, UserProfile
from sober_ui.services.auth import AuthService
from sober_ui.services.sessions import SessionRegistry, UserSession


def make_log(
    drink_id: int,
    logged_at: str = "2024-01-02T10:00:00Z",
    standard_drinks: object = 1,
    name: str = "Beer",
) -> DrinkLog:
    return DrinkLog(
        id=drink_id,
        name=name,
        type="beer",
        size_value=33,
        size_unit="cl",
        abv=0.05,
        logged_at=logged_at,
        standard_drinks=standard_drinks,
    )


def make_logs(count: int, start_id: int = 1) -> list[DrinkLog]:
    return [
        make_log(drink_id, logged_at=f"2024-01-{1 + drink_id % 28:02d}T12:00:00Z")
        for drink_id in range(start_id, start_id + count)
    ]


@dataclass
class FakeSoberApiClient(SoberApiClient):
    """In-memory stand-in for the backend API."""

    token_store: TokenStore = field(
        default_factory=lambda: InMemoryTokenStore("sober_token")
    )
    drink_logs: list[DrinkLog] = field(default_factory=list)
    templates: list[DrinkTemplate] = field(
        default_factory=lambda: [
            DrinkTemplate(
                id=1, name="Lager", type="beer", size_value=33, size_unit="cl", abv=0.05
            ),
            DrinkTemplate(
                id=2,
                name="Red wine",
                type="wine",
                size_value=15,
                size_unit="cl",
                abv=0.13,
            ),
        ]
    )
    parsed: ParsedDrink | None = None
    profile: UserProfile = field(
        default_factory=lambda: UserProfile(
            id=1, email="user@example.com", gender="female", weight_kg=62
        )
    )
    timeline: BACTimeline = field(
        default_factory=lambda: BACTimeline(
            timeline=[
                BACPoint(
                    time="2024-01-02T20:00:00Z",
                    bac=0.02,
                    is_over_bac=False,
                    status="Minimal",
                ),
                BACPoint(
                    time="2024-01-02T20:02:00Z",
                    bac=0.021,
                    is_over_bac=False,
                    status="Minimal",
                ),
            ],
            summary=BACSummary(
                max_bac=0.021,
                max_bac_time="2024-01-02T20:02:00Z",
                sober_since_time=None,
                total_drinks=1,
                drinking_since_time="2024-01-02T19:30:00Z",
                duration_over_bac=0,
                estimated_sober_time="2024-01-02T22:00:00Z",
            ),
        )
    )
    drink_stats: list[DrinkStatsPoint] = field(default_factory=list)
    monthly_stats: list[MonthlyBACStats] = field(default_factory=list)
    token: str = "issued-token"
    error: ApiError | None = None
    unauthorized: bool = False
    page_requests: list[tuple[int, int, dict[str, object]]] = field(
        default_factory=list
    )
    created: list[dict[str, object]] = field(default_factory=list)
    updated: list[dict[str, object]] = field(default_factory=list)
    deleted: list[int] = field(default_factory=list)
    bac_requests: list[dict[str, object]] = field(default_factory=list)
    stats_requests: list[tuple[object, ...]] = field(default_factory=list)
    profile_updates: list[tuple[str, float]] = field(default_factory=list)

    def _check(self) -> None:
        if self.unauthorized:
            self.token_store.clear()
            raise UnauthorizedError()
        if self.error is not None:
            raise self.error

    async def login(self, email: str, password: str) -> str:
        if self.error is not None:
            raise self.error
        return self.token

    async def signup(self, email: str, password: str) -> str:
        if self.error is not None:
            raise self.error
        return "User created"

    async def get_current_user(self) -> CurrentUser:
        self._check()
        return CurrentUser(email=self.profile.email, user_id=self.profile.id)

    async def get_drink_templates(self) -> list[DrinkTemplate]:
        self._check()
        return list(self.templates)

    async def get_drink_logs(
        self, page: int, page_size: int, **filters: object
    ) -> list[DrinkLog]:
        self.page_requests.append((page, page_size, filters))
        self._check()
        start = (page - 1) * page_size
        return self.drink_logs[start : start + page_size]

    async def create_drink_log(self, payload: dict[str, object]) -> int:
        self._check()
        self.created.append(payload)
        return 100 + len(self.created)

    async def update_drink_log(self, payload: dict[str, object]) -> None:
        self._check()
        self.updated.append(payload)

    async def delete_drink_log(self, drink_log_id: int) -> int:
        self._check()
        self.deleted.append(drink_log_id)
        return drink_log_id

    async def parse_drink_log(self, text: str) -> ParsedDrink:
        self._check()
        if self.parsed is None:
            raise ApiError(code=422, type="validation", message="Unparseable")
        return self.parsed

    async def get_current_bac(self, weight_kg: float, gender: str) -> CurrentBAC:
        self._check()
        self.bac_requests.append({"weight_kg": weight_kg, "gender": gender})
        return CurrentBAC(
            current_bac=0.01,
            bac_status="Minimal",
            is_sober=False,
            estimated_sober_time="2024-01-02T22:00:00Z",
            last_calculated="2024-01-02T20:00:00Z",
        )

    async def get_bac_timeline(  # noqa: PLR0913
        self,
        start_time: datetime,
        end_time: datetime,
        weight_kg: float,
        gender: str,
        time_step_mins: int,
    ) -> BACTimeline:
        self._check()
        self.bac_requests.append(
            {
                "start_time": start_time,
                "end_time": end_time,
                "weight_kg": weight_kg,
                "gender": gender,
                "time_step_mins": time_step_mins,
            }
        )
        return self.timeline

    async def get_drink_stats(
        self,
        period: DrinkStatsPeriod,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[DrinkStatsPoint]:
        self._check()
        self.stats_requests.append((period, start_date, end_date))
        return list(self.drink_stats)

    async def get_monthly_bac_stats(
        self, start_date: date | None = None, end_date: date | None = None
    ) -> list[MonthlyBACStats]:
        self._check()
        self.stats_requests.append(("monthly", start_date, end_date))
        return list(self.monthly_stats)

    async def get_user_profile(self) -> UserProfile:
        self._check()
        return self.profile

    async def update_user_profile(self, gender: str, weight_kg: float) -> None:
        self._check()
        self.profile_updates.append((gender, weight_kg))


@dataclass
class GatedDrinkLogSource:
    """Drink log source whose responses are released by the test."""

    calls: list[tuple[int, asyncio.Future]] = field(default_factory=list)

    async def get_drink_logs(
        self, page: int, page_size: int, **filters: object
    ) -> list[DrinkLog]:
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self.calls.append((page, future))
        return await future


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_base="https://api.test/api/v1",
        token_key="sober_token",
        display_timezone="UTC",
        environment="test",
    )


@pytest.fixture
def api_client() -> FakeSoberApiClient:
    return FakeSoberApiClient()


@pytest.fixture
def user_session(settings: Settings, api_client: FakeSoberApiClient) -> UserSession:
    token_store = InMemoryTokenStore(settings.token_key)
    token_store.set("issued-token")
    api_client.token_store = token_store
    return build_user_session(settings, api_client, token_store)


@pytest.fixture
def container(settings: Settings, api_client: FakeSoberApiClient) -> AppContainer:
    def session_factory(token: str) -> UserSession:
        token_store = InMemoryTokenStore(settings.token_key)
        token_store.set(token)
        api_client.token_store = token_store
        return build_user_session(settings, api_client, token_store)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=AuthService(api_client),
        session_registry=SessionRegistry(
            factory=session_factory, ttl_seconds=settings.session_ttl_seconds
        ),
        close_resources=close_resources,
    )
