"""Path and identifier validation for content reads.

Slugs and locale codes arrive from route parameters and end up in
filenames, so every read of the content tree goes through
``safe_read_file``, which refuses anything resolving outside its base
directory.
"""

import os
import re
from pathlib import Path

from dirstash.core.exceptions import InvalidLocaleError, InvalidPathError, InvalidSlugError

LOCALE_PATTERN = re.compile(r"[a-zA-Z0-9_-]{1,10}")
SLUG_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")


def sanitize_filename(name: str) -> str:
    """Reduce a filename to its final component.

    Raises:
        InvalidPathError: If the name contains ``..`` or still holds a
            separator after stripping directory components.
    """
    if ".." in name:
        raise InvalidPathError(f"Invalid filename: {name!r} contains '..'")

    sanitized = os.path.basename(name)
    if not sanitized or "/" in sanitized or "\\" in sanitized:
        raise InvalidPathError(f"Invalid filename: {name!r}")

    return sanitized


def _with_separator(path: str) -> str:
    return path if path.endswith(os.sep) else path + os.sep


def validate_path(candidate: Path | str, base: Path | str) -> None:
    """Ensure ``candidate`` is ``base`` or lies below it.

    Both paths are resolved (symlinks followed) before comparison. The
    prefix check is separator-terminated so ``/base2`` never matches
    ``/base``.

    Raises:
        InvalidPathError: If the resolved candidate is outside ``base``.
    """
    resolved = str(Path(candidate).resolve())
    resolved_base = str(Path(base).resolve())

    if resolved != resolved_base and not resolved.startswith(_with_separator(resolved_base)):
        raise InvalidPathError(f"Invalid file path: {candidate} is outside {base}")


def safe_read_file(path: Path | str, base: Path | str) -> str:
    """Read a UTF-8 text file after validating it against ``base``.

    Raises:
        InvalidPathError: If the path escapes ``base``.
        FileNotFoundError: If the file does not exist.
    """
    path = Path(base, path)
    validate_path(path, base)
    return path.resolve().read_text(encoding="utf-8")


def is_valid_locale(code: str) -> bool:
    """Check a locale code against the allowed character set."""
    return isinstance(code, str) and LOCALE_PATTERN.fullmatch(code) is not None


def validate_locale(code: str) -> str:
    """Return ``code`` if it is a safe locale, else raise InvalidLocaleError."""
    if not is_valid_locale(code):
        raise InvalidLocaleError(code)
    return code


def validate_slug(slug: str) -> str:
    """Return a sanitized slug, or raise InvalidSlugError / InvalidPathError."""
    sanitized = sanitize_filename(slug)
    if sanitized != slug or SLUG_PATTERN.fullmatch(sanitized) is None:
        raise InvalidSlugError(slug)
    return sanitized
