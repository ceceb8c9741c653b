"""Application configuration."""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base: str = "http://localhost:8080/api/v1"
    token_key: str = "sober_token"
    page_size: int = 10
    request_timeout_seconds: float = 10
    display_timezone: str | None = None
    session_ttl_seconds: int = 3600
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_timezone(name: str | None) -> ZoneInfo | None:
    """Return the display timezone, or None for the server's local zone."""
    if name is None:
        return None
    cleaned = name.strip()
    if not cleaned or cleaned.lower() == "local":
        return None
    try:
        return ZoneInfo(cleaned)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown display timezone: {cleaned}") from exc
