from __future__ import annotations

from pathlib import Path
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = ".highlights"
DEFAULT_UPSTREAM_URL = "https://www.scorebat.com/video-api/v3/"
_DATA_DIR_RELATIVE_DEFAULTS: tuple[tuple[str, Path], ...] = (("log_dir", Path("logs")),)
_PATH_FIELDS: tuple[str, ...] = (
    "data_dir",
    *(field_name for field_name, _ in _DATA_DIR_RELATIVE_DEFAULTS),
)
_BOOLEAN_COERCION_FIELDS: tuple[str, ...] = ("telemetry_enabled",)


def _default_in_data_dir(relative_path: Path) -> Path:
    return Path(DEFAULT_DATA_DIR) / relative_path


def _resolve_path(value: str | Path) -> Path:
    return Path(value).expanduser().resolve()


def _parse_bool_with_default(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
        return default
    if not isinstance(value, str):
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


class AppSettings(BaseSettings):
    """
    Canonical runtime configuration.

    Every option is read from `HIGHLIGHTS_*` environment variables (or `.env`).
    """

    model_config = SettingsConfigDict(
        env_prefix="HIGHLIGHTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Upstream provider and cache.
    upstream_url: str = Field(
        default=DEFAULT_UPSTREAM_URL,
        description="Video highlights endpoint returning a `{response: [...]}` JSON envelope.",
    )
    upstream_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for a single upstream request. Values below 0.5 are clamped.",
    )
    cache_ttl_seconds: int = Field(
        default=120,
        ge=1,
        description="How long a successful upstream fetch is served before the next refresh.",
    )

    # Listing.
    page_size: int = Field(default=9, ge=1, description="Records per collection page.")
    home_limit: int = Field(default=6, ge=1, description="Records shown on the home page.")

    # Favorites cookie.
    favorites_cookie_name: str = Field(
        default="favorites",
        description="Cookie holding the visitor's favorited titles.",
    )
    favorites_cookie_max_age_seconds: int = Field(
        default=30 * 24 * 60 * 60,
        ge=0,
        description="Max-Age attribute of the favorites cookie.",
    )

    # Runtime paths and observability.
    data_dir: Path = Field(
        default=Path(DEFAULT_DATA_DIR),
        description="Root runtime directory for logs.",
    )
    log_dir: Path = Field(
        default=_default_in_data_dir(Path("logs")),
        description="Directory for log files. Defaults to `${HIGHLIGHTS_DATA_DIR}/logs`.",
    )
    log_level: str = Field(default="INFO", description="Console log level.")
    telemetry_enabled: bool = Field(
        default=True,
        description="Emit structured telemetry events.",
    )
    telemetry_sink: Literal["none", "log"] = Field(
        default="log",
        description="Telemetry destination. `log` writes to the telemetry log file.",
    )

    @field_validator("upstream_url", mode="before")
    @classmethod
    def _normalize_upstream_url(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("HIGHLIGHTS_UPSTREAM_URL must be a string.")
        normalized = value.strip()
        parsed = urlparse(normalized)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("HIGHLIGHTS_UPSTREAM_URL must be an absolute http/https URL.")
        return normalized

    @field_validator("upstream_timeout_seconds", mode="after")
    @classmethod
    def _clamp_timeout(cls, value: float) -> float:
        return max(0.5, value)

    @field_validator("favorites_cookie_name", mode="before")
    @classmethod
    def _normalize_cookie_name(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("HIGHLIGHTS_FAVORITES_COOKIE_NAME must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("HIGHLIGHTS_FAVORITES_COOKIE_NAME must not be empty.")
        return normalized

    @field_validator("telemetry_sink", mode="before")
    @classmethod
    def _normalize_telemetry_sink(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("HIGHLIGHTS_TELEMETRY_SINK must be a string.")
        normalized = value.strip().lower()
        if normalized in {"none", "log"}:
            return normalized
        raise ValueError("HIGHLIGHTS_TELEMETRY_SINK must be set to: none, log.")

    @field_validator(*_PATH_FIELDS, mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> Any:
        if value is None:
            return None
        return _resolve_path(value)

    @field_validator(*_BOOLEAN_COERCION_FIELDS, mode="before")
    @classmethod
    def _normalize_booleans(cls, value: Any, info: ValidationInfo) -> bool:
        field_name = info.field_name
        assert field_name is not None
        default_value = cls.model_fields[field_name].default
        assert isinstance(default_value, bool)
        return _parse_bool_with_default(value, default=default_value)


def _apply_path_defaults(settings: AppSettings) -> AppSettings:
    updates: dict[str, Path] = {}
    for field_name, relative_default in _DATA_DIR_RELATIVE_DEFAULTS:
        if field_name in settings.model_fields_set:
            continue
        updates[field_name] = settings.data_dir / relative_default
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def _resolve_path_fields(settings: AppSettings) -> AppSettings:
    resolved_updates = {
        field_name: _resolve_path(getattr(settings, field_name)) for field_name in _PATH_FIELDS
    }
    return settings.model_copy(update=resolved_updates)


def load_settings() -> AppSettings:
    settings = AppSettings()
    settings = _apply_path_defaults(settings)
    return _resolve_path_fields(settings)
