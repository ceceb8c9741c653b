"""Tests for settings helpers."""

from zoneinfo import ZoneInfo

import pytest

from sober_ui.config import Settings, resolve_timezone


def test_settings_defaults(monkeypatch) -> None:
    monkeypatch.delenv("API_BASE", raising=False)
    monkeypatch.delenv("PAGE_SIZE", raising=False)

    settings = Settings(_env_file=None)

    assert settings.api_base == "http://localhost:8080/api/v1"
    assert settings.token_key == "sober_token"
    assert settings.page_size == 10


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE", "https://sober.example/api/v1")
    monkeypatch.setenv("PAGE_SIZE", "25")

    settings = Settings(_env_file=None)

    assert settings.api_base == "https://sober.example/api/v1"
    assert settings.page_size == 25


def test_resolve_timezone() -> None:
    assert resolve_timezone(None) is None
    assert resolve_timezone("") is None
    assert resolve_timezone("local") is None
    assert resolve_timezone("Europe/Paris") == ZoneInfo("Europe/Paris")

    with pytest.raises(ValueError, match="Unknown display timezone"):
        resolve_timezone("Mars/Olympus_Mons")
