"""Site configuration model (``config.yml`` at the content root)."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class Pagination(BaseModel):
    """Listing pagination settings."""

    type: Literal["standard", "infinite"] = "standard"
    items_per_page: int = 12


class SiteConfig(BaseModel):
    """Site-wide settings read from the content repository.

    Only the keys the listing pages rely on are declared; everything else in
    ``config.yml`` is kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    company_name: str | None = None
    copyright_year: int | None = None
    content_table: bool | None = None
    item_name: str | None = None
    items_name: str | None = None
    app_url: str | None = None
    pagination: Pagination | None = None
