"""Category and tag models for dirstash.

Item YAML refers to categories and tags either by bare id (``"python"``) or
with an inline object (``{id: python, name: Python}``). Both shapes are
normalized into ``Ref`` values before they reach a collection.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class IdRef(BaseModel):
    """Reference by id only."""

    model_config = ConfigDict(frozen=True)

    id: str

    @property
    def label(self) -> str:
        return self.id


class NamedRef(BaseModel):
    """Reference carrying a display name."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    @property
    def label(self) -> str:
        return self.name


Ref = IdRef | NamedRef


def to_ref(value: Any) -> Ref | None:
    """Normalize one raw YAML value into a reference.

    Strings become ``IdRef``; mappings with an ``id`` become ``NamedRef``
    (falling back to the id as name). Anything else yields None.
    """
    if isinstance(value, IdRef | NamedRef):
        return value
    if isinstance(value, str | int | float) and not isinstance(value, bool):
        text = str(value).strip()
        return IdRef(id=text) if text else None
    if isinstance(value, dict):
        ref_id = value.get("id")
        if ref_id is None or str(ref_id).strip() == "":
            return None
        name = value.get("name")
        return NamedRef(id=str(ref_id), name=str(name) if name is not None else str(ref_id))
    return None


def to_refs(value: Any) -> list[Ref]:
    """Normalize a string, mapping, list of those, or None into a list."""
    if value is None:
        return []
    values = value if isinstance(value, list | tuple) else [value]
    refs = []
    for raw in values:
        ref = to_ref(raw)
        if ref is not None:
            refs.append(ref)
    return refs


class CollectionEntry(BaseModel):
    """A category or tag with its live reference count."""

    id: str
    name: str
    icon_url: str | None = None
    count: int = 0


class Category(CollectionEntry):
    """Model for a category."""


class Tag(CollectionEntry):
    """Model for a tag."""
