"""Models for dirstash."""

from dirstash.models.item import FetchOptions, Item, ItemContent, ItemListing, PromoCode
from dirstash.models.similarity import SimilarItem, SimilarityMetadata
from dirstash.models.site import Pagination, SiteConfig
from dirstash.models.tag import Category, CollectionEntry, IdRef, NamedRef, Ref, Tag, to_ref, to_refs

__all__ = [
    "Category",
    "CollectionEntry",
    "FetchOptions",
    "IdRef",
    "Item",
    "ItemContent",
    "ItemListing",
    "NamedRef",
    "Pagination",
    "PromoCode",
    "Ref",
    "SimilarItem",
    "SimilarityMetadata",
    "SiteConfig",
    "Tag",
    "to_ref",
    "to_refs",
]
