"""Item store: listing, single-item loads and filter queries.

Every call re-reads the content tree and rebuilds the category and tag
collections, so counts always describe the result being returned.
"""

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from urllib.parse import unquote

from dirstash.content.collections import Collection, populate_all, read_collection
from dirstash.content.parser import parse_item, parse_item_or_placeholder, parse_translation
from dirstash.core.exceptions import OperationCancelledError, ParseError
from dirstash.core.paths import SLUG_PATTERN, safe_read_file, validate_locale, validate_path, validate_slug
from dirstash.models.item import FetchOptions, Item, ItemContent, ItemListing
from dirstash.models.tag import Ref, Tag

logger = logging.getLogger(__name__)

DATA_DIR = "data"
CONTENT_SUFFIXES = (".mdx", ".md")

# Escapes of ; / ? : @ & = + $ , # stay encoded when decoding route segments
RESERVED_ESCAPE = re.compile(r"(%(?:2[346BCFbcf]|3[ABDFabdf]|40))")


def decode_uri(value: str) -> str:
    """Percent-decode a route segment, leaving reserved-character escapes intact."""
    parts = RESERVED_ESCAPE.split(value)
    return "".join(part if index % 2 else unquote(part) for index, part in enumerate(parts))


def _matches(refs: list[Ref], ref_id: str) -> bool:
    return any(ref.id == ref_id for ref in refs)


def sort_items(items: list[Item]) -> list[Item]:
    """Featured items first, then most recently updated."""
    by_recency = sorted(items, key=lambda item: item.updated, reverse=True)
    return sorted(by_recency, key=lambda item: not item.featured)


class ItemStore:
    """Reads item records from ``<content_path>/data``."""

    def __init__(
        self,
        content_path: Path | str,
        default_locale: str = "en",
        max_workers: int = 8,
    ) -> None:
        self.content_path = Path(content_path).expanduser()
        self.default_locale = default_locale
        self.max_workers = max_workers

    @property
    def data_path(self) -> Path:
        return self.content_path / DATA_DIR

    def _overlay_locale(self, options: FetchOptions) -> str | None:
        """Locale whose YAML overlays apply, validated; None for the default."""
        if not options.lang or options.lang == self.default_locale:
            return None
        return validate_locale(options.lang)

    def _collections(self, options: FetchOptions) -> tuple[Collection, Collection]:
        categories = read_collection(
            self.content_path, "categories", options.lang, self.default_locale
        )
        tags = read_collection(self.content_path, "tags", options.lang, self.default_locale)
        return categories, tags

    def _slugs(self) -> list[str]:
        if not self.data_path.is_dir():
            logger.warning(f"Content directory not found: {self.data_path}")
            return []

        slugs = []
        for entry in sorted(self.data_path.iterdir(), key=lambda path: path.name):
            if not entry.is_dir():
                continue
            if SLUG_PATTERN.fullmatch(entry.name) is None:
                logger.warning(f"Skipping item directory with invalid name: {entry.name!r}")
                continue
            slugs.append(entry.name)
        return slugs

    def _load_listed_item(
        self, slug: str, lang: str | None, cancel: threading.Event | None
    ) -> Item | None:
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError(f"Listing cancelled before loading {slug}")

        base = self.data_path / slug
        validate_path(base, self.data_path)

        overlay = None
        if lang:
            translation = parse_translation(base, f"{slug}.{lang}.yml")
            if isinstance(translation, dict):
                overlay = translation

        try:
            return parse_item(base, f"{slug}.yml", overlay)
        except ParseError as e:
            logger.error(
                f"Failed to load item {slug}: {e.reason}",
                extra={"slug": slug, "path": str(e.path), "reason": e.reason},
            )
            return None

    def fetch_items(
        self,
        options: FetchOptions | None = None,
        cancel: threading.Event | None = None,
    ) -> ItemListing:
        """List every item with populated categories and tags.

        Items whose YAML is missing or malformed are left out. ``cancel``
        stops pending reads; counts already applied are kept.

        Raises:
            InvalidLocaleError: If ``options.lang`` is not a safe locale.
            OperationCancelledError: If ``cancel`` is set mid-listing.
        """
        options = options or FetchOptions()
        lang = self._overlay_locale(options)
        categories, tags = self._collections(options)
        slugs = self._slugs()

        load = partial(self._load_listed_item, lang=lang, cancel=cancel)
        if slugs:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                loaded = list(executor.map(load, slugs))
        else:
            loaded = []

        items = []
        for item in loaded:
            if item is None:
                continue
            item.tags = populate_all(item.tags, tags)
            item.category = populate_all(item.category, categories)
            items.append(item)

        logger.debug(
            f"Loaded {len(items)} of {len(slugs)} items from {self.data_path}",
            extra={"loaded": len(items), "found": len(slugs), "lang": options.lang},
        )
        return ItemListing(
            total=len(items),
            items=sort_items(items),
            categories=categories.entries(),
            tags=tags.entries(sort_by_name=options.sort_tags),
        )

    def _content_file(self, base: Path, slug: str, lang: str | None) -> Path | None:
        candidates = []
        if lang:
            candidates.extend(base / f"{slug}.{lang}{suffix}" for suffix in CONTENT_SUFFIXES)
        candidates.extend(base / f"{slug}{suffix}" for suffix in CONTENT_SUFFIXES)

        for candidate in candidates:
            validate_path(candidate, base)
            if candidate.is_file():
                return candidate
        return None

    def fetch_item(self, slug: str, options: FetchOptions | None = None) -> ItemContent | None:
        """Load one item with its Markdown body.

        A malformed record yields a placeholder rather than an error.
        Returns None when ``data/<slug>/`` does not exist.

        Raises:
            InvalidSlugError: If ``slug`` is not a valid slug.
            InvalidPathError: If ``slug`` attempts traversal.
            InvalidLocaleError: If ``options.lang`` is not a safe locale.
        """
        options = options or FetchOptions()
        slug = validate_slug(slug)
        content_lang = validate_locale(options.lang) if options.lang else None
        overlay_lang = self._overlay_locale(options)

        base = self.data_path / slug
        validate_path(base, self.content_path)
        if not base.is_dir():
            logger.info(f"Item not found: {slug}")
            return None

        categories, tags = self._collections(options)

        overlay = None
        if overlay_lang:
            logger.debug(f"Fetching translation {slug} ({overlay_lang})")
            translation = parse_translation(base, f"{slug}.{overlay_lang}.yml")
            if isinstance(translation, dict):
                overlay = translation

        meta = parse_item_or_placeholder(base, f"{slug}.yml", overlay)
        meta.tags = populate_all(meta.tags, tags)
        meta.category = populate_all(meta.category, categories)

        content_file = self._content_file(base, slug, content_lang)
        if content_file is None:
            return ItemContent(meta=meta, content=meta.markdown)

        return ItemContent(meta=meta, content=safe_read_file(content_file, self.content_path))

    def fetch_by_category(self, category: str, options: FetchOptions | None = None) -> ItemListing:
        """Items in ``category``, with tag counts recomputed over them."""
        category = decode_uri(category)
        listing = self.fetch_items(options)
        items = [item for item in listing.items if _matches(item.category, category)]

        tag_counts: dict[str, int] = {}
        for item in items:
            for tag_id in item.tag_ids:
                tag_counts[tag_id] = tag_counts.get(tag_id, 0) + 1

        tags = [
            Tag(**tag.model_dump(exclude={"count"}), count=tag_counts[tag.id])
            for tag in listing.tags
            if tag.id in tag_counts
        ]
        return ItemListing(total=len(items), items=items, categories=listing.categories, tags=tags)

    def fetch_by_tag(self, tag: str, options: FetchOptions | None = None) -> ItemListing:
        """Items tagged ``tag``.

        ``total`` and the category and tag counts are those of the full
        listing, unlike ``fetch_by_category`` which rescopes them.
        """
        tag = decode_uri(tag)
        listing = self.fetch_items(options)
        items = [item for item in listing.items if _matches(item.tags, tag)]
        return ItemListing(
            total=listing.total, items=items, categories=listing.categories, tags=listing.tags
        )

    def fetch_by_category_and_tag(
        self, category: str, tag: str, options: FetchOptions | None = None
    ) -> ItemListing:
        """Items in ``category`` that also carry ``tag``; counts stay unscoped.

        Both ids are matched as given, without URL decoding.
        """
        listing = self.fetch_items(options)
        items = [
            item
            for item in listing.items
            if _matches(item.category, category) and _matches(item.tags, tag)
        ]
        return ItemListing(
            total=len(items), items=items, categories=listing.categories, tags=listing.tags
        )

