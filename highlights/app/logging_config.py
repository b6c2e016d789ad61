from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from structlog.typing import EventDict, Processor

from highlights.app.config import AppSettings

APP_LOGGER_NAME = "highlights"
TELEMETRY_LOGGER_NAME = "highlights.telemetry"
LOG_FILE_NAME = "highlights.log"
TELEMETRY_LOG_FILE_NAME = "highlights-telemetry.log"
# Server loggers that should share the application's console/file output.
_ADOPTED_LOGGER_NAMES: tuple[str, ...] = ("uvicorn.error",)


def configure_application_logging(settings: AppSettings) -> Path:
    log_dir = settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    telemetry_log_file = log_dir / TELEMETRY_LOG_FILE_NAME

    _configure_structlog()

    console_level = _resolve_log_level(settings.log_level)
    handlers = [
        _console_handler(level=console_level),
        _file_handler(log_file, level=logging.DEBUG),
    ]

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    _install_handlers(app_logger, handlers, level=logging.DEBUG)
    for adopted_name in _ADOPTED_LOGGER_NAMES:
        _install_handlers(logging.getLogger(adopted_name), handlers, level=console_level)

    telemetry_logger = logging.getLogger(TELEMETRY_LOGGER_NAME)
    _install_handlers(
        telemetry_logger,
        [_file_handler(telemetry_log_file, level=logging.INFO)],
        level=logging.INFO,
    )

    app_logger.info(
        "logging configured console_level=%s path=%s telemetry_path=%s",
        logging.getLevelName(console_level),
        log_file,
        telemetry_log_file,
    )
    return log_file


def _resolve_log_level(raw_level: str) -> int:
    resolved = logging.getLevelName(raw_level.strip().upper())
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _install_handlers(
    logger: logging.Logger,
    handlers: list[logging.Handler],
    *,
    level: int,
) -> None:
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        # Shared handlers are re-added below; only close the ones being dropped.
        if existing not in handlers:
            existing.close()
    for handler in handlers:
        logger.addHandler(handler)


def _console_handler(*, level: int) -> logging.Handler:
    stream = sys.stdout
    handler = logging.StreamHandler(stream=stream)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=_stream_supports_color(stream)),
            ],
        )
    )
    return handler


def _file_handler(path: Path, *, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_pre_chain(),
            processors=[
                _add_record_metadata,
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
        )
    )
    return handler


def _shared_pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]


def _add_record_metadata(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        event_dict["module"] = record.module
        event_dict["lineno"] = record.lineno
        event_dict["thread_name"] = record.threadName
    return event_dict


def _stream_supports_color(stream: object) -> bool:
    isatty = getattr(stream, "isatty", None)
    if callable(isatty):
        try:
            return bool(isatty())
        except (OSError, ValueError):
            return False
    return False
