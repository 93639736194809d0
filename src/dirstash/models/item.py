"""Item model for dirstash."""

import json
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dirstash.models.tag import Category, Ref, Tag, to_refs

UPDATED_AT_FORMAT = "%Y-%m-%d %H:%M"


class PromoCode(BaseModel):
    """Promotional code attached to an item."""

    code: str
    description: str | None = None
    discount_type: Literal["percentage", "fixed", "free_shipping"] = "percentage"
    discount_value: float | None = None
    expires_at: str | None = None
    terms: str | None = None
    url: str | None = None


class Item(BaseModel):
    """One listed item, loaded from ``data/<slug>/<slug>.yml``.

    ``updated_at`` keeps the raw ``yyyy-MM-dd HH:mm`` string from YAML and
    ``updated`` is always parsed from it; an ``updated`` key in the input is
    ignored. Keys not declared here are kept as
    extra fields.
    """

    model_config = ConfigDict(extra="allow")

    slug: str
    name: str
    description: str = ""
    source_url: str
    category: list[Ref] = Field(default_factory=list)
    tags: list[Ref] = Field(default_factory=list)
    featured: bool = False
    icon_url: str | None = None
    updated_at: str
    updated: datetime
    promo_code: PromoCode | None = None
    markdown: str | None = None
    is_source_url_active: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _derive_updated(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {key: value for key, value in data.items() if key != "updated"}
            raw = data.get("updated_at")
            if isinstance(raw, datetime):
                raw = raw.strftime(UPDATED_AT_FORMAT)
            elif isinstance(raw, date):
                raw = f"{raw.isoformat()} 00:00"
            if not isinstance(raw, str):
                raise ValueError("updated_at is required")
            data = {**data, "updated_at": raw, "updated": datetime.strptime(raw, UPDATED_AT_FORMAT)}
        return data

    @field_validator("category", "tags", mode="before")
    @classmethod
    def _normalize_refs(cls, value: Any) -> list[Ref]:
        return to_refs(value)

    @property
    def category_ids(self) -> list[str]:
        return [ref.id for ref in self.category]

    @property
    def tag_ids(self) -> list[str]:
        return [ref.id for ref in self.tags]


class ItemContent(BaseModel):
    """A single item with its Markdown/MDX body."""

    meta: Item
    content: str | None = None


class ItemListing(BaseModel):
    """Result of a listing query."""

    total: int
    items: list[Item]
    categories: list[Category]
    tags: list[Tag]


class FetchOptions(BaseModel):
    """Options shared by every listing query."""

    model_config = ConfigDict(frozen=True)

    lang: str | None = None
    sort_tags: bool = False

    def cache_key(self) -> str:
        """Serialize with sorted keys so equal options share a cache entry."""
        return json.dumps(self.model_dump(exclude_none=True), sort_keys=True)
