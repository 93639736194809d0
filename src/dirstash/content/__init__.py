"""Content store and related-items engine."""

from dirstash.content.service import ContentService
from dirstash.content.store import ItemStore

__all__ = ["ContentService", "ItemStore"]
