"""Tests for the query service."""

import random

import pytest
from dirstash.content.service import ContentService
from dirstash.core.exceptions import ParseError
from dirstash.models.item import FetchOptions


def related(service, slug="a", **kwargs):
    item = service.fetch_item(slug).meta
    return service.fetch_similar_items(item, **kwargs)


class TestQueries:
    """Test that the service exposes the store queries."""

    def test_fetch_items(self, scenario, service):
        assert service.fetch_items().total == 3

    def test_content_path(self, scenario, service):
        assert service.content_path == scenario.root

    def test_content_path_override(self, scenario, test_config, tmp_path):
        other = tmp_path / "other"
        (other / "data").mkdir(parents=True)

        service = ContentService(test_config, content_path=other)

        assert service.fetch_items().total == 0

    def test_filters(self, scenario, service):
        assert service.fetch_by_category("c2").total == 1
        assert service.fetch_by_tag("y").total == 1
        assert service.fetch_by_category_and_tag("c1", "x").total == 2


class TestRelatedItems:
    """Test related items through the service, with a fake clock."""

    def test_scenario(self, scenario, service):
        results = related(service)

        assert [r.item.slug for r in results] == ["b"]
        assert results[0].score == pytest.approx(0.8633, abs=1e-3)
        assert results[0].similarity_percentage == 86

    def test_related_items_carry_populated_names(self, scenario, service):
        results = related(service)

        assert results[0].item.category[0].name == "Cat One"

    def test_second_call_hits_cache(self, scenario, service):
        related(service)
        related(service)

        metrics = service.get_similarity_performance_metrics()
        assert metrics.total_calls == 2
        assert metrics.cache_hits == 1
        assert metrics.cache_size == 1

    def test_expired_entry_is_recomputed(self, scenario, service, clock):
        related(service)
        related(service)
        clock.advance(301)
        related(service)

        metrics = service.get_similarity_performance_metrics()
        assert metrics.total_calls == 3
        assert metrics.cache_hits == 1

    def test_locale_gets_its_own_entry(self, scenario, service):
        related(service)
        related(service, options=FetchOptions(lang="fr"))

        assert service.get_similarity_cache_stats().total_entries == 2

    def test_empty_results_are_not_cached(self, scenario, service):
        assert related(service, "c") == []

        assert service.get_similarity_cache_stats().total_entries == 0

    def test_cache_stats_and_clear(self, scenario, service, clock):
        related(service)
        related(service, "b")
        clock.advance(301)

        stats = service.get_similarity_cache_stats()
        assert stats.total_entries == 2
        assert stats.valid_entries == 0
        assert stats.expired_entries == 2
        assert stats.cache_ttl == 300

        service.clear_similarity_cache()
        assert service.get_similarity_cache_stats().total_entries == 0

    def test_clear_metrics(self, scenario, service):
        related(service)

        service.clear_similarity_performance_metrics()

        metrics = service.get_similarity_performance_metrics()
        assert metrics.total_calls == 0
        assert metrics.cache_hits == 0
        assert metrics.average_response_time == 0

    def test_max_results_from_config(self, scenario, test_config, clock):
        test_config.similarity.max_results = 1
        for slug in ("d", "e"):
            scenario.item(slug, category="c1", tags=["x"])
        service = ContentService(test_config, clock=clock, rng=random.Random(0))

        assert len(related(service)) == 1

    def test_sweep_on_call(self, scenario, test_config, clock):
        test_config.similarity.sweep_probability = 1.0
        service = ContentService(test_config, clock=clock, rng=random.Random(0))
        related(service)
        clock.advance(301)

        related(service, "c")

        assert service.get_similarity_cache_stats().total_entries == 0


class TestSiteConfig:
    """Test the cached config.yml reader."""

    def test_reads_config(self, content, service):
        content.write_yaml(
            "config.yml",
            {
                "company_name": "Acme",
                "item_name": "Tool",
                "items_name": "Tools",
                "pagination": {"type": "infinite", "items_per_page": 24},
                "theme": "dark",
            },
        )

        site = service.get_site_config()

        assert site.company_name == "Acme"
        assert site.items_name == "Tools"
        assert site.pagination.type == "infinite"
        assert site.pagination.items_per_page == 24
        assert site.model_extra == {"theme": "dark"}

    def test_missing_file_gives_defaults(self, content, service):
        site = service.get_site_config()

        assert site.company_name is None
        assert site.pagination is None

    def test_cached_for_a_minute(self, content, service, clock):
        content.write_yaml("config.yml", {"company_name": "Before"})
        assert service.get_site_config().company_name == "Before"

        content.write_yaml("config.yml", {"company_name": "After"})
        assert service.get_site_config().company_name == "Before"

        clock.advance(61)
        assert service.get_site_config().company_name == "After"

    def test_non_mapping_raises(self, content, service):
        content.write_yaml("config.yml", ["not", "a", "mapping"])

        with pytest.raises(ParseError):
            service.get_site_config()
