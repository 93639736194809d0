"""Logging setup for the dirstash CLI.

Library modules only call ``logging.getLogger(__name__)``. The CLI calls
``setup_logging`` once, which attaches to the ``dirstash`` logger:

- a Rich handler on stderr, so tables and JSON on stdout stay clean
- a rotating file handler in ``simple``, ``detailed`` or ``json`` format

Context passed with ``extra=`` (slug, path, cache hit, timings) is written
as a ``context`` object by the JSON format.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from dirstash.core.config import Config, LoggingConfig

_initialized = False
_console: Console | None = None

# Attributes every LogRecord carries; anything else came from ``extra=``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

FILE_FORMATS = {
    "simple": "%(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
}


def get_console() -> Console:
    """Shared stderr console for log output and CLI status messages."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Fields attached to ``record`` through ``extra=``."""
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with ``extra=`` fields under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = record_context(record)
        if context:
            log_data["context"] = context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def _level(name: str) -> int:
    return getattr(logging, name, logging.WARNING)


def _console_handler(log_config: LoggingConfig) -> logging.Handler:
    handler = RichHandler(
        console=get_console(),
        show_time=log_config.console_timestamps,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
    )
    handler.setLevel(_level(log_config.console_level))
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(log_config: LoggingConfig) -> logging.Handler:
    log_path = Path(log_config.file_path).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        log_path,
        maxBytes=log_config.max_bytes,
        backupCount=log_config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(_level(log_config.file_level))
    if log_config.file_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(FILE_FORMATS[log_config.file_format], datefmt="%Y-%m-%d %H:%M:%S")
        )
    return handler


def setup_logging(config: Config | None = None) -> None:
    """Attach handlers to the ``dirstash`` logger.

    Idempotent; later calls are ignored. Without ``config`` the saved
    configuration is loaded.
    """
    global _initialized

    if _initialized:
        return

    if config is None:
        from dirstash.core.config import Config

        config = Config.load()

    log_config = config.logging

    root_logger = logging.getLogger("dirstash")
    root_logger.setLevel(_level(log_config.level))
    root_logger.handlers.clear()

    if log_config.console_enabled:
        root_logger.addHandler(_console_handler(log_config))
    if log_config.file_enabled:
        root_logger.addHandler(_file_handler(log_config))

    for logger_name, level in log_config.filters.items():
        if level:
            logging.getLogger(logger_name).setLevel(_level(level))

    _initialized = True
    root_logger.debug("Logging initialized", extra={"content_path": config.general.content_path})


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``dirstash`` namespace.

    ``get_logger("cli.items")`` and ``get_logger("dirstash.cli.items")``
    return the same logger. Handlers come from ``setup_logging``.
    """
    if name.startswith("dirstash."):
        return logging.getLogger(name)
    return logging.getLogger(f"dirstash.{name}")
