from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog
from pydantic import ValidationError

from highlights.app.config import DEFAULT_UPSTREAM_URL, AppSettings, load_settings
from highlights.app.dependencies import (
    get_catalogue_service,
    get_match_cache,
    get_settings,
    reset_cached_dependencies,
)
from highlights.app.logging_config import (
    TELEMETRY_LOG_FILE_NAME,
    _stream_supports_color,  # pyright: ignore[reportPrivateUsage]
    configure_application_logging,
)


def test_settings_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HIGHLIGHTS_DATA_DIR", str(tmp_path / "data"))

    settings = load_settings()

    assert settings.upstream_url == DEFAULT_UPSTREAM_URL
    assert settings.upstream_timeout_seconds == 10.0
    assert settings.cache_ttl_seconds == 120
    assert settings.page_size == 9
    assert settings.home_limit == 6
    assert settings.favorites_cookie_name == "favorites"
    assert settings.favorites_cookie_max_age_seconds == 30 * 24 * 60 * 60
    assert settings.log_dir == (tmp_path / "data" / "logs").resolve()


def test_settings_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HIGHLIGHTS_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HIGHLIGHTS_LOG_DIR", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("HIGHLIGHTS_UPSTREAM_URL", "  http://localhost:9000/feed  ")
    monkeypatch.setenv("HIGHLIGHTS_UPSTREAM_TIMEOUT_SECONDS", "0.1")
    monkeypatch.setenv("HIGHLIGHTS_CACHE_TTL_SECONDS", "30")
    monkeypatch.setenv("HIGHLIGHTS_TELEMETRY_SINK", " NONE ")

    settings = load_settings()

    assert settings.upstream_url == "http://localhost:9000/feed"
    assert settings.upstream_timeout_seconds == 0.5
    assert settings.cache_ttl_seconds == 30
    assert settings.telemetry_sink == "none"
    assert settings.log_dir == (tmp_path / "elsewhere").resolve()


def test_settings_bool_branches(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HIGHLIGHTS_DATA_DIR", str(tmp_path))

    monkeypatch.setenv("HIGHLIGHTS_TELEMETRY_ENABLED", "off")
    assert load_settings().telemetry_enabled is False

    monkeypatch.setenv("HIGHLIGHTS_TELEMETRY_ENABLED", "yes")
    assert load_settings().telemetry_enabled is True

    monkeypatch.setenv("HIGHLIGHTS_TELEMETRY_ENABLED", "invalid")
    assert load_settings().telemetry_enabled is True


@pytest.mark.parametrize(
    ("env_name", "env_value"),
    [
        ("HIGHLIGHTS_UPSTREAM_URL", "ftp://example.test/feed"),
        ("HIGHLIGHTS_UPSTREAM_URL", "not a url"),
        ("HIGHLIGHTS_TELEMETRY_SINK", "otlp"),
        ("HIGHLIGHTS_PAGE_SIZE", "0"),
        ("HIGHLIGHTS_FAVORITES_COOKIE_NAME", "   "),
    ],
)
def test_settings_reject_invalid_values(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    env_name: str,
    env_value: str,
) -> None:
    monkeypatch.setenv("HIGHLIGHTS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv(env_name, env_value)

    with pytest.raises(ValidationError):
        load_settings()


def test_dependencies_are_cached_until_reset(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("HIGHLIGHTS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HIGHLIGHTS_CACHE_TTL_SECONDS", "45")
    reset_cached_dependencies()
    try:
        catalogue = get_catalogue_service()
        assert get_catalogue_service() is catalogue
        assert catalogue.cache is get_match_cache()
        assert get_match_cache().ttl_seconds == 45
        assert get_match_cache().state() == "empty"

        monkeypatch.setenv("HIGHLIGHTS_CACHE_TTL_SECONDS", "90")
        reset_cached_dependencies()
        assert get_settings().cache_ttl_seconds == 90
        assert get_catalogue_service() is not catalogue
    finally:
        reset_cached_dependencies()


def test_configure_application_logging_creates_files(tmp_path: Path) -> None:
    settings = AppSettings(data_dir=tmp_path, log_dir=tmp_path / "logs", log_level="warning")

    log_file = configure_application_logging(settings)
    logging.getLogger("highlights.test").info("runtime-log-test")
    structlog.get_logger("highlights.telemetry").info(
        "telemetry",
        telemetry_event="test.event",
    )

    app_logger = logging.getLogger("highlights")
    assert app_logger.propagate is False
    assert len(app_logger.handlers) == 2
    assert {handler.level for handler in app_logger.handlers} == {logging.WARNING, logging.DEBUG}
    for handler in app_logger.handlers:
        handler.flush()

    telemetry_logger = logging.getLogger("highlights.telemetry")
    assert telemetry_logger.propagate is False
    assert len(telemetry_logger.handlers) == 1
    for handler in telemetry_logger.handlers:
        handler.flush()

    parsed_events = [
        json.loads(line)
        for line in log_file.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
    runtime_event = next(
        event for event in parsed_events if event.get("event") == "runtime-log-test"
    )
    assert runtime_event["logger"] == "highlights.test"
    assert runtime_event["level"] == "info"
    assert runtime_event["lineno"]
    assert all(event.get("telemetry_event") != "test.event" for event in parsed_events)

    telemetry_lines = (
        (settings.log_dir / TELEMETRY_LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()
    )
    telemetry_events = [json.loads(line) for line in telemetry_lines if line.strip()]
    assert any(event.get("telemetry_event") == "test.event" for event in telemetry_events)


def test_reconfiguring_logging_does_not_duplicate_handlers(tmp_path: Path) -> None:
    settings = AppSettings(data_dir=tmp_path, log_dir=tmp_path / "logs")

    configure_application_logging(settings)
    configure_application_logging(settings)

    assert len(logging.getLogger("highlights").handlers) == 2
    assert len(logging.getLogger("uvicorn.error").handlers) == 2
    assert len(logging.getLogger("highlights.telemetry").handlers) == 1


def test_stream_supports_color_detects_tty() -> None:
    class _TTY:
        def isatty(self) -> bool:
            return True

    class _Pipe:
        def isatty(self) -> bool:
            return False

    class _Closed:
        def isatty(self) -> bool:
            raise ValueError("I/O operation on closed file")

    assert _stream_supports_color(_TTY()) is True
    assert _stream_supports_color(_Pipe()) is False
    assert _stream_supports_color(_Closed()) is False
    assert _stream_supports_color(object()) is False
