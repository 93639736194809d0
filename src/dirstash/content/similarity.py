"""Related-items ranking with a time-bounded result cache.

Items are compared on shared tags and categories. Scores are weighted
(tags 0.6, categories 0.4), normalized by the larger of the source item's
tag or category count, and compressed logarithmically into [0, 1].
"""

import logging
import math
import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import cmp_to_key

from pydantic import BaseModel

from dirstash.content.telemetry import PerformanceMetrics
from dirstash.core.exceptions import ParseError
from dirstash.models.item import FetchOptions, Item, ItemListing
from dirstash.models.similarity import SimilarItem, SimilarityMetadata
from dirstash.models.tag import Ref

logger = logging.getLogger(__name__)

TAG_WEIGHT = 0.6
CATEGORY_WEIGHT = 0.4
DEFAULT_MAX_RESULTS = 6
CACHE_TTL = 5 * 60.0
SWEEP_PROBABILITY = 0.1
TIE_EPSILON = 0.001


def normalize_labels(refs: list[Ref]) -> list[str]:
    """Lower-cased, trimmed labels; bare ids for IdRef, names for NamedRef."""
    labels = []
    for ref in refs:
        label = ref.label.strip().lower()
        if label:
            labels.append(label)
    return labels


def count_common(source: list[str], candidate: list[str]) -> int:
    """Number of ``candidate`` entries present in ``source``."""
    if not source or not candidate:
        return 0
    lookup = set(source)
    return sum(1 for label in candidate if label in lookup)


def similarity_score(
    common_tags: int, common_categories: int, total_tags: int, total_categories: int
) -> float:
    """Weighted, log-compressed overlap score in [0, 1]."""
    max_total = max(total_tags, total_categories, 1)
    tag_score = common_tags * TAG_WEIGHT / max_total
    category_score = common_categories * CATEGORY_WEIGHT / max_total
    combined = tag_score + category_score
    return min(math.log1p(combined * 9) / math.log(10), 1.0)


def _compare(a: SimilarItem, b: SimilarItem) -> float:
    if abs(a.score - b.score) < TIE_EPSILON:
        return b.common_total - a.common_total
    return b.score - a.score


def rank(results: list[SimilarItem], max_results: int) -> list[SimilarItem]:
    """Sort by score, breaking near-ties on total shared elements."""
    return sorted(results, key=cmp_to_key(_compare))[:max_results]


@dataclass
class CacheEntry:
    data: list[SimilarItem]
    timestamp: float
    ttl: float


class CacheStats(BaseModel):
    """Entry counts of the similarity cache."""

    total_entries: int
    valid_entries: int
    expired_entries: int
    cache_ttl: float


class SimilarityCache:
    """TTL cache for ranked results, expired lazily on read or by sweep."""

    def __init__(self, ttl: float = CACHE_TTL, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def key(slug: str, max_results: int, options: FetchOptions) -> str:
        return f"{slug}_{max_results}_{options.cache_key()}"

    def _is_valid(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp < entry.ttl

    def get(self, key: str) -> list[SimilarItem] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not self._is_valid(entry):
                return None
            return list(entry.data)

    def set(self, key: str, data: list[SimilarItem]) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(data=list(data), timestamp=self._clock(), ttl=self.ttl)

    def sweep(self) -> int:
        """Drop expired entries; returns how many were removed."""
        with self._lock:
            expired = [key for key, entry in self._entries.items() if not self._is_valid(entry)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(
                f"Evicted {len(expired)} expired similarity entries",
                extra={"evicted": len(expired)},
            )
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            valid = sum(1 for entry in self._entries.values() if self._is_valid(entry))
            return CacheStats(
                total_entries=len(self._entries),
                valid_entries=valid,
                expired_entries=len(self._entries) - valid,
                cache_ttl=self.ttl,
            )


class SimilarityEngine:
    """Ranks items against a source item using tag and category overlap."""

    def __init__(
        self,
        list_items: Callable[[FetchOptions], ItemListing],
        cache: SimilarityCache | None = None,
        metrics: PerformanceMetrics | None = None,
        default_max_results: int = DEFAULT_MAX_RESULTS,
        sweep_probability: float = SWEEP_PROBABILITY,
        rng: random.Random | None = None,
    ) -> None:
        self._list_items = list_items
        self.cache = cache or SimilarityCache()
        self.metrics = metrics or PerformanceMetrics()
        self.default_max_results = default_max_results
        self.sweep_probability = sweep_probability
        self._rng = rng or random.Random()

    def _elapsed_ms(self, start: float) -> float:
        return (time.perf_counter() - start) * 1000

    def score_candidates(self, source: Item, candidates: list[Item]) -> list[SimilarItem]:
        """Score every candidate other than ``source``; zero scores are dropped."""
        source_tags = normalize_labels(source.tags)
        source_categories = normalize_labels(source.category)

        results = []
        for candidate in candidates:
            if not candidate.slug or candidate.slug == source.slug:
                continue
            item_tags = normalize_labels(candidate.tags)
            item_categories = normalize_labels(candidate.category)
            common_tags = count_common(source_tags, item_tags)
            common_categories = count_common(source_categories, item_categories)
            score = similarity_score(
                common_tags, common_categories, len(source_tags), len(source_categories)
            )
            if score <= 0:
                continue
            results.append(
                SimilarItem(
                    item=candidate,
                    score=score,
                    common_tags=common_tags,
                    common_categories=common_categories,
                    metadata=SimilarityMetadata(
                        item_tags_count=len(item_tags),
                        item_categories_count=len(item_categories),
                        has_common_tags=common_tags > 0,
                        has_common_categories=common_categories > 0,
                    ),
                )
            )
        return results

    def fetch_similar_items(
        self,
        item: Item,
        max_results: int | None = None,
        options: FetchOptions | None = None,
        use_cache: bool = True,
    ) -> list[SimilarItem]:
        """Up to ``max_results`` items most similar to ``item``, best first."""
        start = time.perf_counter()
        options = options or FetchOptions()

        if self._rng.random() < self.sweep_probability:
            self.cache.sweep()

        if not item.tags and not item.category:
            return []
        if not item.slug:
            return []
        if max_results is None or max_results <= 0:
            max_results = self.default_max_results

        cache_key = SimilarityCache.key(item.slug, max_results, options)
        if use_cache:
            cached = self.cache.get(cache_key)
            if cached is not None:
                elapsed = self._elapsed_ms(start)
                self.metrics.record(elapsed, cache_hit=True)
                logger.debug(
                    f"Similarity cache hit for {item.slug}",
                    extra={"slug": item.slug, "cache_hit": True, "duration_ms": elapsed},
                )
                return cached

        try:
            items = self._list_items(options).items
        except (OSError, ParseError) as e:
            logger.warning(
                f"Could not load items for similarity of {item.slug}: {e}",
                extra={"slug": item.slug},
            )
            self.metrics.record(self._elapsed_ms(start))
            return []

        if not items:
            self.metrics.record(self._elapsed_ms(start))
            return []

        results = rank(self.score_candidates(item, items), max_results)

        if use_cache and results:
            self.cache.set(cache_key, results)

        elapsed = self._elapsed_ms(start)
        self.metrics.record(elapsed)
        logger.debug(
            f"Ranked {len(results)} items similar to {item.slug}",
            extra={
                "slug": item.slug,
                "cache_hit": False,
                "results": len(results),
                "duration_ms": elapsed,
            },
        )
        return results
