"""Test fixtures for dirstash."""

import random
from pathlib import Path
from typing import Any

import pytest
import yaml
from dirstash.content.service import ContentService
from dirstash.core.config import Config, GeneralConfig, LoggingConfig, SimilarityConfig


class FakeClock:
    """Monotonic clock the tests can move forward."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ContentTree:
    """Builds a content root on disk."""

    def __init__(self, root: Path) -> None:
        self.root = root
        (root / "data").mkdir(parents=True, exist_ok=True)

    def write_yaml(self, relative: str, data: Any) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True))
        return path

    def write_text(self, relative: str, text: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    def categories(self, entries: list[dict], lang: str | None = None) -> Path:
        name = f"categories.{lang}.yml" if lang else "categories.yml"
        return self.write_yaml(f"categories/{name}", entries)

    def tags(self, entries: list[dict], lang: str | None = None) -> Path:
        name = f"tags.{lang}.yml" if lang else "tags.yml"
        return self.write_yaml(f"tags/{name}", entries)

    def item(
        self,
        slug: str,
        name: str | None = None,
        category: Any = "c1",
        tags: list | None = None,
        updated_at: str = "2024-01-15 10:30",
        **extra: Any,
    ) -> Path:
        data = {
            "name": name or slug.title(),
            "description": f"About {slug}",
            "source_url": f"https://example.com/{slug}",
            "category": category,
            "tags": tags or [],
            "updated_at": updated_at,
            **extra,
        }
        return self.write_yaml(f"data/{slug}/{slug}.yml", data)

    def overlay(self, slug: str, lang: str, data: dict) -> Path:
        return self.write_yaml(f"data/{slug}/{slug}.{lang}.yml", data)


@pytest.fixture
def content(tmp_path) -> ContentTree:
    """Empty content root."""
    return ContentTree(tmp_path / "content")


@pytest.fixture
def scenario(content) -> ContentTree:
    """Items A (x, y / c1), B (x / c1) and C (z / c2)."""
    content.categories([{"id": "c1", "name": "Cat One"}, {"id": "c2", "name": "Cat Two"}])
    content.tags(
        [{"id": "x", "name": "X"}, {"id": "y", "name": "Y"}, {"id": "z", "name": "Z"}]
    )
    content.item("a", category="c1", tags=["x", "y"], updated_at="2024-03-01 09:00")
    content.item("b", category="c1", tags=["x"], updated_at="2024-02-01 09:00")
    content.item("c", category="c2", tags=["z"], updated_at="2024-01-01 09:00")
    return content


@pytest.fixture
def test_config(content) -> Config:
    """Config pointing at the temporary content root, file logging off.

    The opportunistic cache sweep is disabled so TTL tests are deterministic.
    """
    return Config(
        general=GeneralConfig(content_path=str(content.root), max_workers=4),
        similarity=SimilarityConfig(sweep_probability=0.0),
        logging=LoggingConfig(file_enabled=False),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(test_config, clock) -> ContentService:
    """Service with a fake clock."""
    return ContentService(test_config, clock=clock, rng=random.Random(0))
