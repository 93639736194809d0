"""Core module for dirstash."""

from dirstash.core.logging import get_console, get_logger, setup_logging

__all__ = [
    "get_console",
    "get_logger",
    "setup_logging",
]
