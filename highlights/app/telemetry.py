from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import structlog

from highlights.app.logging_config import TELEMETRY_LOGGER_NAME

_SENSITIVE_ATTRIBUTE_TOKENS: frozenset[str] = frozenset(
    {
        "authorization",
        "cookie",
        "embed",
        "favorite",
        "secret",
        "token",
    }
)
_MAX_STRING_LENGTH = 160

TelemetryValue = bool | int | float | str | None


class TelemetrySink(Protocol):
    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        ...


class NoOpTelemetrySink:
    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        _ = (event_name, attributes)


class StructuredLogTelemetrySink:
    def __init__(self) -> None:
        self._logger = structlog.get_logger(TELEMETRY_LOGGER_NAME)

    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        self._logger.info("telemetry", telemetry_event=event_name, **dict(attributes))


@dataclass(frozen=True)
class TelemetryClient:
    enabled: bool
    sink: TelemetrySink

    @classmethod
    def disabled(cls) -> TelemetryClient:
        return cls(enabled=False, sink=NoOpTelemetrySink())

    def emit(self, event_name: str, **attributes: Any) -> None:
        if not self.enabled:
            return
        self.sink.emit(event_name=event_name, attributes=sanitize_attributes(attributes))


def build_telemetry_client(*, enabled: bool, sink: Literal["none", "log"]) -> TelemetryClient:
    if not enabled or sink == "none":
        return TelemetryClient.disabled()
    if sink == "log":
        return TelemetryClient(enabled=True, sink=StructuredLogTelemetrySink())

    logging.getLogger(TELEMETRY_LOGGER_NAME).warning(
        "unsupported telemetry sink requested; disabling telemetry sink=%s",
        sink,
    )
    return TelemetryClient.disabled()


def sanitize_attributes(attributes: Mapping[str, Any]) -> dict[str, TelemetryValue]:
    sanitized: dict[str, TelemetryValue] = {}
    for raw_key, raw_value in attributes.items():
        key = str(raw_key).strip().lower()
        if not key:
            continue
        if any(token in key for token in _SENSITIVE_ATTRIBUTE_TOKENS):
            sanitized[key] = "[redacted]"
        else:
            sanitized[key] = _sanitize_value(raw_value)
    return sanitized


def _sanitize_value(value: Any) -> TelemetryValue:
    if value is None or isinstance(value, bool | int | float):
        return value
    if isinstance(value, str):
        compact = " ".join(value.split())
        if len(compact) <= _MAX_STRING_LENGTH:
            return compact
        return f"{compact[:_MAX_STRING_LENGTH]}..."
    return type(value).__name__
