"""Query API consumed by the page layer.

A ``ContentService`` owns the similarity cache, the performance counters and
the site config cache, so each instance (one per process, or one per test)
has its own state.
"""

import random
import threading
import time
from collections.abc import Callable
from pathlib import Path

from dirstash.content.similarity import CacheStats, SimilarityCache, SimilarityEngine
from dirstash.content.site import SiteConfigReader
from dirstash.content.store import ItemStore
from dirstash.content.telemetry import MetricsSnapshot, PerformanceMetrics
from dirstash.core.config import Config
from dirstash.models.item import FetchOptions, Item, ItemContent, ItemListing
from dirstash.models.similarity import SimilarItem
from dirstash.models.site import SiteConfig


class ContentService:
    """Item listing, single-item loads, filters and related items."""

    def __init__(
        self,
        config: Config | None = None,
        content_path: Path | str | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        if config is None:
            config = Config.load()
        self.config = config

        root = Path(content_path).expanduser() if content_path else config.content_root
        self.store = ItemStore(
            root,
            default_locale=config.general.default_locale,
            max_workers=config.general.max_workers,
        )
        self.metrics = PerformanceMetrics()
        self.similarity = SimilarityEngine(
            self.store.fetch_items,
            cache=SimilarityCache(ttl=config.similarity.cache_ttl, clock=clock),
            metrics=self.metrics,
            default_max_results=config.similarity.max_results,
            sweep_probability=config.similarity.sweep_probability,
            rng=rng,
        )
        self.site_config = SiteConfigReader(root, clock=clock)

    @property
    def content_path(self) -> Path:
        return self.store.content_path

    def fetch_items(
        self, options: FetchOptions | None = None, cancel: threading.Event | None = None
    ) -> ItemListing:
        return self.store.fetch_items(options, cancel=cancel)

    def fetch_item(self, slug: str, options: FetchOptions | None = None) -> ItemContent | None:
        return self.store.fetch_item(slug, options)

    def fetch_by_category(self, category: str, options: FetchOptions | None = None) -> ItemListing:
        return self.store.fetch_by_category(category, options)

    def fetch_by_tag(self, tag: str, options: FetchOptions | None = None) -> ItemListing:
        return self.store.fetch_by_tag(tag, options)

    def fetch_by_category_and_tag(
        self, category: str, tag: str, options: FetchOptions | None = None
    ) -> ItemListing:
        return self.store.fetch_by_category_and_tag(category, tag, options)

    def fetch_similar_items(
        self,
        item: Item,
        max_results: int | None = None,
        options: FetchOptions | None = None,
        use_cache: bool = True,
    ) -> list[SimilarItem]:
        return self.similarity.fetch_similar_items(item, max_results, options, use_cache)

    def get_similarity_cache_stats(self) -> CacheStats:
        return self.similarity.cache.stats()

    def clear_similarity_cache(self) -> None:
        self.similarity.cache.clear()

    def get_similarity_performance_metrics(self) -> MetricsSnapshot:
        return self.metrics.snapshot(cache_size=len(self.similarity.cache))

    def clear_similarity_performance_metrics(self) -> None:
        self.metrics.reset()

    def get_site_config(self) -> SiteConfig:
        return self.site_config.get()
