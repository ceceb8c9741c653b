"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sober_ui.adapters.sober_api_client import HttpxSoberApiClient, SoberApiClient
from sober_ui.adapters.token_store import InMemoryTokenStore, TokenStore
from sober_ui.config import Settings, resolve_timezone
from sober_ui.services.analytics import AnalyticsService
from sober_ui.services.auth import AuthService
from sober_ui.services.bac import BacService
from sober_ui.services.drink_entry import DrinkEntryService
from sober_ui.services.drink_logs import DrinkLogStore
from sober_ui.services.profile import ProfileService
from sober_ui.services.sessions import SessionRegistry, UserSession


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    session_registry: SessionRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_user_session(
    settings: Settings, client: SoberApiClient, token_store: TokenStore
) -> UserSession:
    """Create the services for one signed-in user."""
    tz = resolve_timezone(settings.display_timezone)
    drink_logs = DrinkLogStore(source=client, page_size=settings.page_size, tz=tz)
    profile_service = ProfileService(client)
    return UserSession(
        token_store=token_store,
        client=client,
        drink_logs=drink_logs,
        drink_entry_service=DrinkEntryService(client=client, store=drink_logs),
        profile_service=profile_service,
        bac_service=BacService(
            client=client, profile_service=profile_service, tz=tz
        ),
        analytics_service=AnalyticsService(client=client, tz=tz),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    api_client = HttpxSoberApiClient.create(
        base_url=resolved_settings.api_base,
        token_store=InMemoryTokenStore(resolved_settings.token_key),
        timeout=resolved_settings.request_timeout_seconds,
    )

    def session_factory(token: str) -> UserSession:
        token_store = InMemoryTokenStore(resolved_settings.token_key)
        token_store.set(token)
        return build_user_session(
            resolved_settings, api_client.with_token_store(token_store), token_store
        )

    session_registry = SessionRegistry(
        factory=session_factory,
        ttl_seconds=resolved_settings.session_ttl_seconds,
    )

    async def close_resources() -> None:
        await api_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=AuthService(api_client),
        session_registry=session_registry,
        close_resources=close_resources,
    )
