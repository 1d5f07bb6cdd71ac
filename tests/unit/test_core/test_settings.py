"""Tests for pydantic-settings configuration."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from docstore_service.core.settings import (
    AppSettings,
    DatabaseSettings,
    EventSettings,
    WebSocketSettings,
    clear_all_caches,
    get_event_settings,
    get_settings,
)


@pytest.fixture(autouse=True)
def fresh_caches():
    clear_all_caches()
    yield
    clear_all_caches()


def test_event_defaults() -> None:
    settings = EventSettings()

    assert settings.buffer_size == 500
    assert settings.message_max_length == 2048
    assert settings.replay_default_limit == 100
    assert settings.replay_max_limit == 500


def test_env_prefix_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENTS_BUFFER_SIZE", "3")
    monkeypatch.setenv("WS_MAX_CONNECTIONS", "7")

    assert get_event_settings().buffer_size == 3
    assert get_settings().websocket.max_connections == 7


def test_loaders_are_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_event_settings()
    monkeypatch.setenv("EVENTS_BUFFER_SIZE", "42")

    assert get_event_settings() is first
    clear_all_caches()
    assert get_event_settings().buffer_size == 42


def test_default_limit_cannot_exceed_max() -> None:
    with pytest.raises(ValidationError, match="replay_default_limit"):
        EventSettings(replay_default_limit=600, replay_max_limit=500)


@pytest.mark.parametrize("buffer_size", [0, -1])
def test_buffer_size_must_be_positive(buffer_size: int) -> None:
    with pytest.raises(ValidationError):
        EventSettings(buffer_size=buffer_size)


def test_settings_are_frozen() -> None:
    settings = WebSocketSettings()

    with pytest.raises(ValidationError):
        settings.max_connections = 1


def test_debug_forbidden_in_production() -> None:
    with pytest.raises(ValidationError, match="Debug mode"):
        AppSettings(environment="production", debug=True)


def test_sqlite_detection() -> None:
    assert DatabaseSettings(url="sqlite+aiosqlite:///:memory:").is_sqlite is True
    assert DatabaseSettings(url="postgresql+asyncpg://db/docstore").is_sqlite is False
