"""Category and tag indexes with live reference counts."""

import logging
import threading
from pathlib import Path
from typing import Literal

from dirstash.content.parser import parse_translation, read_yaml
from dirstash.core.exceptions import ParseError
from dirstash.core.paths import validate_locale
from dirstash.models.tag import Category, CollectionEntry, NamedRef, Ref, Tag

logger = logging.getLogger(__name__)

CollectionKind = Literal["categories", "tags"]

ENTRY_TYPES: dict[str, type[CollectionEntry]] = {
    "categories": Category,
    "tags": Tag,
}


class Collection:
    """An id-keyed index of categories or tags.

    Counts start at zero when the master list is loaded and grow as items
    are populated against it. A collection lives for one listing call.
    """

    def __init__(self, kind: CollectionKind, entries: list[CollectionEntry] | None = None) -> None:
        self.kind = kind
        self.entry_type = ENTRY_TYPES[kind]
        self._entries: dict[str, CollectionEntry] = {}
        self._lock = threading.Lock()
        for entry in entries or []:
            self._entries[entry.id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: str) -> bool:
        return entry_id in self._entries

    def get(self, entry_id: str) -> CollectionEntry | None:
        return self._entries.get(entry_id)

    def populate(self, ref: Ref) -> NamedRef:
        """Resolve a reference and count it.

        Unknown ids are added with a count of 1 so an item's assignment
        always renders, even when the master list is stale.
        """
        fallback_name = ref.name if isinstance(ref, NamedRef) else ref.id
        with self._lock:
            entry = self._entries.get(ref.id)
            if entry is None:
                self._entries[ref.id] = self.entry_type(id=ref.id, name=fallback_name, count=1)
                return NamedRef(id=ref.id, name=fallback_name)
            entry.count += 1
            return NamedRef(id=entry.id, name=entry.name)

    def entries(self, sort_by_name: bool = False) -> list[CollectionEntry]:
        """Entries in master-list order (synthesized ids last)."""
        with self._lock:
            entries = list(self._entries.values())
        if sort_by_name:
            entries.sort(key=lambda entry: entry.name.casefold())
        return entries


def _merge_translations(collection: dict[str, dict], translations: object) -> None:
    if not isinstance(translations, list):
        return
    for translation in translations:
        if not isinstance(translation, dict):
            continue
        entry_id = translation.get("id")
        if entry_id is None:
            continue
        entry_id = str(entry_id)
        if entry_id in collection:
            collection[entry_id] = {**collection[entry_id], **translation, "id": entry_id}


def read_collection(
    content_path: Path,
    kind: CollectionKind,
    lang: str | None = None,
    default_locale: str = "en",
) -> Collection:
    """Load the master list for ``kind`` with an optional locale overlay.

    ``<root>/<kind>/<kind>.yml`` is used when ``<root>/<kind>/`` exists,
    otherwise ``<root>/<kind>.yml``. Translations are only looked up in the
    directory form.

    Raises:
        InvalidLocaleError: If ``lang`` is needed and not a safe locale.
        ParseError: If the master list is not a list of ``{id, name}``.
    """
    collection_dir = content_path / kind
    use_dir = collection_dir.is_dir()
    base = collection_dir if use_dir else content_path

    try:
        raw = read_yaml(base, f"{kind}.yml")
    except FileNotFoundError:
        logger.debug(f"No {kind} master list under {content_path}")
        return Collection(kind)

    if raw is None:
        raw = []
    if not isinstance(raw, list):
        raise ParseError(base / f"{kind}.yml", "expected a list of entries")

    records: dict[str, dict] = {}
    for record in raw:
        if not isinstance(record, dict) or record.get("id") is None:
            raise ParseError(base / f"{kind}.yml", f"entry without an id: {record!r}")
        entry_id = str(record["id"])
        records[entry_id] = {**record, "id": entry_id}

    if use_dir and lang and lang != default_locale:
        validate_locale(lang)
        _merge_translations(records, parse_translation(collection_dir, f"{kind}.{lang}.yml"))

    entry_type = ENTRY_TYPES[kind]
    entries = []
    for record in records.values():
        entries.append(
            entry_type(
                id=record["id"],
                name=str(record.get("name") or record["id"]),
                icon_url=record.get("icon_url"),
            )
        )
    return Collection(kind, entries)


def populate_all(refs: list[Ref], collection: Collection) -> list[Ref]:
    """Populate every reference of one item against ``collection``."""
    return [collection.populate(ref) for ref in refs]
