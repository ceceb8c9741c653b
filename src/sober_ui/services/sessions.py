"""Per-user session state, cached by bearer token."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sober_ui.adapters.sober_api_client import SoberApiClient
from sober_ui.adapters.token_store import TokenStore
from sober_ui.services.analytics import AnalyticsService
from sober_ui.services.bac import BacService
from sober_ui.services.drink_entry import DrinkEntryService
from sober_ui.services.drink_logs import DrinkLogStore
from sober_ui.services.profile import ProfileService


@dataclass
class UserSession:
    """State and services for one signed-in user."""

    token_store: TokenStore
    client: SoberApiClient
    drink_logs: DrinkLogStore
    drink_entry_service: DrinkEntryService
    profile_service: ProfileService
    bac_service: BacService
    analytics_service: AnalyticsService


@dataclass
class _SessionEntry:
    session: UserSession
    expires_at: datetime


@dataclass
class SessionRegistry:
    """Keeps user sessions alive for a sliding TTL."""

    factory: Callable[[str], UserSession]
    ttl_seconds: int
    _entries: dict[str, _SessionEntry] = field(default_factory=dict)

    def get(self, token: str) -> UserSession:
        """Return the session for a token, creating it if needed."""
        now = datetime.now(tz=UTC)
        entry = self._entries.get(token)
        if entry is not None and now < entry.expires_at:
            entry.expires_at = now + timedelta(seconds=self.ttl_seconds)
            return entry.session

        self._purge_expired(now)
        session = self.factory(token)
        self._entries[token] = _SessionEntry(
            session=session,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        return session

    def evict(self, token: str) -> None:
        """Drop the session for a token."""
        self._entries.pop(token, None)

    def __len__(self) -> int:
        return len(self._entries)

    def _purge_expired(self, now: datetime) -> None:
        expired = [
            token for token, entry in self._entries.items() if now >= entry.expires_at
        ]
        for token in expired:
            self._entries.pop(token, None)
