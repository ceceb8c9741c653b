"""Sōber backend API client."""

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol

import httpx

from sober_ui.adapters.token_store import TokenStore
from sober_ui.domain.analytics import DrinkStatsPeriod, DrinkStatsPoint, MonthlyBACStats
from sober_ui.domain.bac import BACPoint, BACSummary, BACTimeline, CurrentBAC
from sober_ui.domain.drink_logs import DrinkLog, DrinkTemplate, ParsedDrink
from sober_ui.domain.errors import ApiError, UnauthorizedError
from sober_ui.domain.users import CurrentUser, UserProfile


class SoberApiClient(Protocol):
    """Interface for the Sōber backend API."""

    async def login(self, email: str, password: str) -> str:
        """Authenticate and return a bearer token."""

    async def signup(self, email: str, password: str) -> str:
        """Create an account and return the backend message."""

    async def get_current_user(self) -> CurrentUser:
        """Return the authenticated user."""

    async def get_drink_templates(self) -> list[DrinkTemplate]:
        """Return the available drink templates."""

    async def get_drink_logs(
        self, page: int, page_size: int, **filters: object
    ) -> list[DrinkLog]:
        """Return one page of the user's drink logs."""

    async def create_drink_log(self, payload: dict[str, object]) -> int:
        """Create a drink log and return its id."""

    async def update_drink_log(self, payload: dict[str, object]) -> None:
        """Update a drink log; the payload carries its id."""

    async def delete_drink_log(self, drink_log_id: int) -> int:
        """Delete a drink log and return its id."""

    async def parse_drink_log(self, text: str) -> ParsedDrink:
        """Parse a free-text drink description."""

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
        """Return a BAC timeline for the time window."""

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

    async def get_user_profile(self) -> UserProfile:
        """Return the user's profile."""

    async def update_user_profile(self, gender: str, weight_kg: float) -> None:
        """Update the user's gender and weight."""


@dataclass
class HttpxSoberApiClient(SoberApiClient):
    """HTTPX-backed Sōber API client."""

    base_url: str
    token_store: TokenStore
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(
        cls, base_url: str, token_store: TokenStore, timeout: float = 10
    ) -> "HttpxSoberApiClient":
        """Create an API client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            token_store=token_store,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    def with_token_store(self, token_store: TokenStore) -> "HttpxSoberApiClient":
        """Return a client sharing this HTTP session but using another token."""
        return replace(self, token_store=token_store)

    async def login(self, email: str, password: str) -> str:
        """Log in and return the issued token."""
        payload = await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            authenticated=False,
        )
        return str(_as_dict(payload).get("token", ""))

    async def signup(self, email: str, password: str) -> str:
        """Sign up and return the backend message."""
        payload = await self._request(
            "POST",
            "/auth/signup",
            json={"email": email, "password": password},
            authenticated=False,
        )
        return str(_as_dict(payload).get("message", ""))

    async def get_current_user(self) -> CurrentUser:
        """Fetch the authenticated user."""
        payload = _as_dict(await self._request("GET", "/auth/me"))
        return CurrentUser(
            email=str(payload.get("email", "")),
            user_id=int(_float(payload.get("user_id"))),
        )

    async def get_drink_templates(self) -> list[DrinkTemplate]:
        """Fetch drink templates."""
        payload = _as_dict(await self._request("GET", "/drink-templates"))
        rows = payload.get("drink_templates")
        return [_parse_template(row) for row in _dict_rows(rows)]

    async def get_drink_logs(
        self, page: int, page_size: int, **filters: object
    ) -> list[DrinkLog]:
        """Fetch one page of drink logs."""
        params: dict[str, object] = {"page": page, "page_size": page_size}
        params.update(
            {key: value for key, value in filters.items() if value is not None}
        )
        payload = _as_dict(await self._request("GET", "/drink-logs", params=params))
        rows = payload.get("drink_logs")
        return [_parse_drink_log(row) for row in _dict_rows(rows)]

    async def create_drink_log(self, payload: dict[str, object]) -> int:
        """Create a drink log."""
        response = await self._request("POST", "/drink-logs", json=payload)
        return int(_float(_as_dict(response).get("id")))

    async def update_drink_log(self, payload: dict[str, object]) -> None:
        """Update a drink log."""
        await self._request("PUT", "/drink-logs", json=payload)

    async def delete_drink_log(self, drink_log_id: int) -> int:
        """Delete a drink log."""
        response = await self._request("DELETE", f"/drink-logs/{drink_log_id}")
        return int(_float(_as_dict(response).get("id", drink_log_id)))

    async def parse_drink_log(self, text: str) -> ParsedDrink:
        """Parse free text into a drink template."""
        payload = _as_dict(
            await self._request("POST", "/drink-logs/parse", json={"text": text})
        )
        return ParsedDrink(
            drink_template=_parse_template(_as_dict(payload.get("drink_template"))),
            confidence=_float(payload.get("confidence")),
        )

    async def get_current_bac(self, weight_kg: float, gender: str) -> CurrentBAC:
        """Fetch the current BAC snapshot."""
        payload = _as_dict(
            await self._request(
                "GET",
                "/bac/current",
                params={"weight_kg": weight_kg, "gender": gender},
            )
        )
        return CurrentBAC(
            current_bac=_float(payload.get("current_bac")),
            bac_status=str(payload.get("bac_status", "Sober")),
            is_sober=bool(payload.get("is_sober", True)),
            estimated_sober_time=_optional_str(payload.get("estimated_sober_time")),
            last_calculated=_optional_str(payload.get("last_calculated")),
        )

    async def get_bac_timeline(  # noqa: PLR0913
        self,
        start_time: datetime,
        end_time: datetime,
        weight_kg: float,
        gender: str,
        time_step_mins: int,
    ) -> BACTimeline:
        """Fetch a BAC timeline."""
        payload = _as_dict(
            await self._request(
                "GET",
                "/bac/timeline",
                params={
                    "start_time": _iso_utc(start_time),
                    "end_time": _iso_utc(end_time),
                    "weight_kg": weight_kg,
                    "gender": gender,
                    "time_step_mins": time_step_mins,
                },
            )
        )
        points = payload.get("timeline")
        return BACTimeline(
            timeline=[_parse_bac_point(point) for point in _dict_rows(points)],
            summary=_parse_bac_summary(_as_dict(payload.get("summary"))),
        )

    async def get_drink_stats(
        self,
        period: DrinkStatsPeriod,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[DrinkStatsPoint]:
        """Fetch drink totals per period."""
        params: dict[str, object] = {"period": period}
        params.update(_date_range(start_date, end_date))
        payload = _as_dict(
            await self._request("GET", "/analytics/drink-stats", params=params)
        )
        rows = payload.get("stats")
        return [
            DrinkStatsPoint(
                time_period=str(row.get("time_period", "")),
                drink_count=int(_float(row.get("drink_count"))),
                total_standard_drinks=_float(row.get("total_standard_drinks")),
            )
            for row in _dict_rows(rows)
        ]

    async def get_monthly_bac_stats(
        self, start_date: date | None = None, end_date: date | None = None
    ) -> list[MonthlyBACStats]:
        """Fetch monthly BAC category counts."""
        payload = _as_dict(
            await self._request(
                "GET",
                "/analytics/monthly-bac",
                params=_date_range(start_date, end_date),
            )
        )
        rows = payload.get("stats")
        return [_parse_monthly_stats(row) for row in _dict_rows(rows)]

    async def get_user_profile(self) -> UserProfile:
        """Fetch the user's profile."""
        payload = _as_dict(await self._request("GET", "/users/profile"))
        return UserProfile(
            id=int(_float(payload.get("id"))),
            email=str(payload.get("email", "")),
            gender=str(payload.get("gender", "unknown")),
            weight_kg=_float(payload.get("weight_kg")),
            created_at=_optional_str(payload.get("created_at")),
            updated_at=_optional_str(payload.get("updated_at")),
        )

    async def update_user_profile(self, gender: str, weight_kg: float) -> None:
        """Update the user's profile."""
        await self._request(
            "PUT",
            "/users/profile",
            json={"gender": gender, "weight_kg": weight_kg},
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, object] | None = None,
        json: dict[str, object] | None = None,
        authenticated: bool = True,
    ) -> object:
        headers: dict[str, str] = {}
        if authenticated:
            token = self.token_store.get()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        response = await self.http_client.request(
            method,
            f"{self.base_url}{path}",
            params=params,
            json=json,
            headers=headers,
            timeout=self.timeout,
        )
        if authenticated and response.status_code == httpx.codes.UNAUTHORIZED:
            self.token_store.clear()
            raise UnauthorizedError(
                correlation_id=str(_error_body(response).get("correlation_id", ""))
            )
        if response.is_error:
            raise _to_api_error(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                code=response.status_code,
                type="http",
                message="Invalid response body",
            ) from exc


def _to_api_error(response: httpx.Response) -> ApiError:
    """Normalize an error response into an ApiError."""
    body = _error_body(response)
    details = body.get("details")
    return ApiError(
        code=int(_float(body.get("code")) or response.status_code),
        type=str(body.get("type") or "http"),
        message=str(body.get("message") or response.reason_phrase),
        correlation_id=str(body.get("correlation_id") or ""),
        details=details if isinstance(details, list) else None,
    )


def _error_body(response: httpx.Response) -> dict[str, object]:
    try:
        return _as_dict(response.json())
    except ValueError:
        return {}


def _as_dict(value: object) -> dict[str, object]:
    return value if isinstance(value, dict) else {}


def _dict_rows(value: object) -> list[dict[str, object]]:
    """Return the object rows of a list payload, skipping anything else."""
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


def _float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _iso_utc(value: datetime) -> str:
    formatted = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return formatted.replace("+00:00", "Z")


def _date_range(start_date: date | None, end_date: date | None) -> dict[str, object]:
    params: dict[str, object] = {}
    if start_date is not None:
        params["start_date"] = start_date.isoformat()
    if end_date is not None:
        params["end_date"] = end_date.isoformat()
    return params


def _parse_template(row: dict[str, object]) -> DrinkTemplate:
    return DrinkTemplate(
        id=int(_float(row.get("id"))),
        name=str(row.get("name", "")),
        type=str(row.get("type", "")),
        size_value=_float(row.get("size_value")),
        size_unit=str(row.get("size_unit", "")),
        abv=_float(row.get("abv")),
    )


def _parse_drink_log(row: dict[str, object]) -> DrinkLog:
    logged_at = row.get("logged_at")
    return DrinkLog(
        id=int(_float(row.get("id"))),
        name=str(row.get("name", "")),
        type=str(row.get("type", "")),
        size_value=_float(row.get("size_value")),
        size_unit=str(row.get("size_unit", "")),
        abv=_float(row.get("abv")),
        logged_at=logged_at if isinstance(logged_at, str) else "",
        standard_drinks=row.get("standard_drinks"),
    )


def _parse_bac_point(row: dict[str, object]) -> BACPoint:
    return BACPoint(
        time=str(row.get("time", "")),
        bac=_float(row.get("bac")),
        is_over_bac=bool(row.get("is_over_bac", False)),
        status=str(row.get("status", "Sober")),
    )


def _parse_bac_summary(row: dict[str, object]) -> BACSummary:
    return BACSummary(
        max_bac=_float(row.get("max_bac")),
        max_bac_time=_optional_str(row.get("max_bac_time")),
        sober_since_time=_optional_str(row.get("sober_since_time")),
        total_drinks=int(_float(row.get("total_drinks"))),
        drinking_since_time=_optional_str(row.get("drinking_since_time")),
        duration_over_bac=_float(row.get("duration_over_bac")),
        estimated_sober_time=_optional_str(row.get("estimated_sober_time")),
    )


def _parse_monthly_stats(row: dict[str, object]) -> MonthlyBACStats:
    raw_counts = _as_dict(row.get("counts"))
    return MonthlyBACStats(
        year=int(_float(row.get("year"))),
        month=int(_float(row.get("month"))),
        counts={key: int(_float(value)) for key, value in raw_counts.items()},
        total=int(_float(row.get("total"))),
    )
