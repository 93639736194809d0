"""Related-item models for dirstash."""

from pydantic import BaseModel, computed_field

from dirstash.models.item import Item


class SimilarityMetadata(BaseModel):
    """Shape of the candidate item, kept alongside its score."""

    item_tags_count: int
    item_categories_count: int
    has_common_tags: bool
    has_common_categories: bool


class SimilarItem(BaseModel):
    """A candidate item ranked against a source item."""

    item: Item
    score: float
    common_tags: int
    common_categories: int
    metadata: SimilarityMetadata

    @computed_field
    @property
    def similarity_percentage(self) -> int:
        return round(self.score * 100)

    @property
    def common_total(self) -> int:
        return self.common_tags + self.common_categories
