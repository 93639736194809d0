"""Item record parsing.

``parse_item`` is strict and raises ``ParseError``; callers decide whether a
failure drops the record (listings) or substitutes a placeholder
(``parse_item_or_placeholder``, used for single-item pages).
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dirstash.core.exceptions import ParseError
from dirstash.core.paths import safe_read_file, sanitize_filename
from dirstash.models.item import UPDATED_AT_FORMAT, Item
from dirstash.models.tag import IdRef

logger = logging.getLogger(__name__)

PLACEHOLDER_DESCRIPTION = "Content temporarily unavailable"


def slug_from_filename(filename: str) -> str:
    """Strip the YAML extension from a filename."""
    for suffix in (".yml", ".yaml"):
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return filename


def read_yaml(base: Path, filename: str) -> Any:
    """Read and decode one YAML file below ``base``.

    Raises:
        InvalidPathError: If the filename escapes ``base``.
        FileNotFoundError: If the file does not exist.
        ParseError: If the YAML cannot be decoded.
    """
    filename = sanitize_filename(filename)
    path = base / filename
    raw = safe_read_file(path, base)
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ParseError(path, str(e)) from e


def parse_item(base: Path, filename: str, overlay: dict[str, Any] | None = None) -> Item:
    """Parse ``base/filename`` into an Item.

    The slug comes from the filename. When given, ``overlay`` fields are
    merged over the decoded mapping before validation.

    Raises:
        InvalidPathError: If the filename escapes ``base``.
        ParseError: If the file is missing, undecodable or fails validation.
        OSError: For filesystem errors other than a missing file.
    """
    filename = sanitize_filename(filename)
    path = base / filename
    try:
        data = read_yaml(base, filename)
    except FileNotFoundError as e:
        raise ParseError(path, "file not found") from e
    except UnicodeDecodeError as e:
        raise ParseError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ParseError(path, "expected a mapping at the top level")

    if overlay:
        data = {**data, **overlay}
    data["slug"] = slug_from_filename(filename)

    try:
        return Item.model_validate(data)
    except ValidationError as e:
        raise ParseError(path, str(e)) from e


def placeholder_item(filename: str) -> Item:
    """Minimal record rendered when an item file cannot be parsed."""
    slug = slug_from_filename(filename)
    now = datetime.now()
    item = Item(
        slug=slug,
        name=slug,
        description=PLACEHOLDER_DESCRIPTION,
        category=[IdRef(id="unknown")],
        tags=[],
        source_url="#",
        updated_at=now.replace(hour=0, minute=0).strftime(UPDATED_AT_FORMAT),
        markdown=None,
    )
    item.updated = now
    return item


def parse_item_or_placeholder(
    base: Path, filename: str, overlay: dict[str, Any] | None = None
) -> Item:
    """Parse an item, substituting a placeholder on ParseError."""
    try:
        return parse_item(base, filename, overlay)
    except ParseError as e:
        logger.error(
            f"Failed to parse item {filename}: {e.reason}",
            extra={"path": str(e.path), "reason": e.reason, "placeholder": True},
        )
        return placeholder_item(filename)


def parse_translation(base: Path, filename: str) -> Any | None:
    """Read an optional locale overlay.

    Returns None when the file is missing, unreadable or not valid YAML.
    Path violations still raise InvalidPathError.
    """
    try:
        data = read_yaml(base, filename)
    except (OSError, UnicodeDecodeError, ParseError):
        return None
    if not isinstance(data, dict | list):
        return None
    return data
