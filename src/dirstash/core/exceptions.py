"""Custom exceptions for dirstash."""

from pathlib import Path


class DirStashError(Exception):
    """Base exception for dirstash."""


class ConfigError(DirStashError):
    """Configuration error."""


class InvalidPathError(DirStashError):
    """A filename or path escapes its allowed base directory."""


class InvalidInputError(DirStashError):
    """Untrusted input (route parameter) failed validation."""


class InvalidLocaleError(InvalidInputError):
    """Locale code contains characters outside the allowed set."""

    def __init__(self, locale: str) -> None:
        super().__init__(f"Invalid language code: {locale!r}")
        self.locale = locale


class InvalidSlugError(InvalidInputError):
    """Item slug does not match the slug format."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Invalid slug format: {slug!r}")
        self.slug = slug


class ParseError(DirStashError):
    """A content file could not be read or decoded."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class OperationCancelledError(DirStashError):
    """The caller abandoned the request before it completed."""
