"""Tests for the dirstash CLI."""

import json

import pytest
import toml
from dirstash import __version__
from dirstash.cli.main import app
from dirstash.core.config import Config
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the config directory at a temporary home and skip log setup."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr("dirstash.core.logging._initialized", True)
    return home


@pytest.fixture
def root(scenario) -> str:
    return str(scenario.root)


class TestMain:
    """Test the top-level command."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"dirstash {__version__}" in result.output


class TestItemsList:
    """Test `dirstash items list`."""

    def test_lists_items(self, root):
        result = runner.invoke(app, ["items", "list", "--content", root])

        assert result.exit_code == 0
        assert "3 items" in result.output
        assert "Cat One" in result.output

    def test_filter_by_category(self, root):
        result = runner.invoke(app, ["items", "list", "--category", "c2", "-c", root])

        assert result.exit_code == 0
        assert "1 items" in result.output

    def test_filter_by_category_and_tag(self, root):
        result = runner.invoke(app, ["items", "list", "--category", "c1", "-t", "y", "-c", root])

        assert result.exit_code == 0
        assert "1 items" in result.output

    def test_tag_filter_counts_shown_items(self, root):
        result = runner.invoke(app, ["items", "list", "--tag", "x", "-c", root])

        assert result.exit_code == 0
        assert "2 items" in result.output

    def test_no_matches(self, root):
        result = runner.invoke(app, ["items", "list", "--tag", "nope", "-c", root])

        assert result.exit_code == 0
        assert "No items found." in result.output

    def test_invalid_locale(self, root):
        result = runner.invoke(app, ["items", "list", "--lang", "../x", "-c", root])

        assert result.exit_code == 1


class TestItemsShow:
    """Test `dirstash items show`."""

    def test_shows_item(self, scenario, root):
        scenario.write_text("data/a/a.md", "Hello body")

        result = runner.invoke(app, ["items", "show", "a", "-c", root])

        assert result.exit_code == 0
        assert "About a" in result.output
        assert "Hello body" in result.output

    def test_missing_item(self, root):
        result = runner.invoke(app, ["items", "show", "nope", "-c", root])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_slug(self, root):
        result = runner.invoke(app, ["items", "show", "a.yml", "-c", root])

        assert result.exit_code == 1


class TestItemsSimilar:
    """Test `dirstash items similar`."""

    def test_shows_related(self, root):
        result = runner.invoke(app, ["items", "similar", "a", "-c", root])

        assert result.exit_code == 0
        assert "86%" in result.output

    def test_nothing_related(self, root):
        result = runner.invoke(app, ["items", "similar", "c", "-c", root])

        assert result.exit_code == 0
        assert "No items similar" in result.output

    def test_missing_item(self, root):
        result = runner.invoke(app, ["items", "similar", "nope", "-c", root])

        assert result.exit_code == 1


class TestItemsExport:
    """Test `dirstash items export`."""

    def test_exports_json(self, root, tmp_path):
        output = tmp_path / "export.json"

        result = runner.invoke(app, ["items", "export", "-o", str(output), "-c", root])

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert data["total"] == 3
        assert [item["slug"] for item in data["items"]] == ["a", "b", "c"]
        assert {tag["id"]: tag["count"] for tag in data["tags"]} == {"x": 2, "y": 1, "z": 1}


class TestCollections:
    """Test `dirstash collections list`."""

    def test_lists_categories(self, root):
        result = runner.invoke(app, ["collections", "list", "categories", "-c", root])

        assert result.exit_code == 0
        assert "Cat One" in result.output
        assert "Cat Two" in result.output

    def test_empty(self, content):
        result = runner.invoke(app, ["collections", "list", "tags", "-c", str(content.root)])

        assert result.exit_code == 0
        assert "No tags found." in result.output

    def test_unknown_kind(self, root):
        result = runner.invoke(app, ["collections", "list", "authors", "-c", root])

        assert result.exit_code != 0


class TestConfigCommands:
    """Test `dirstash config`."""

    def test_init_creates_file(self, isolated_home):
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert (isolated_home / ".config" / "dirstash" / "config.toml").exists()

    def test_init_refuses_overwrite(self):
        runner.invoke(app, ["config", "init"])

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1

    def test_set_and_show(self, isolated_home):
        result = runner.invoke(app, ["config", "set", "similarity.max_results", "3"])
        assert result.exit_code == 0

        saved = toml.load(isolated_home / ".config" / "dirstash" / "config.toml")
        assert saved["similarity"]["max_results"] == 3

        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "max_results = 3" in result.output

    def test_set_unknown_key(self):
        result = runner.invoke(app, ["config", "set", "general.nope", "1"])

        assert result.exit_code == 1

    def test_set_invalid_value(self):
        result = runner.invoke(app, ["config", "set", "general.max_workers", "many"])

        assert result.exit_code == 1

    def test_set_content_path_is_used(self, root):
        runner.invoke(app, ["config", "set", "general.content_path", root])

        result = runner.invoke(app, ["items", "list"])

        assert "3 items" in result.output


class TestBrokenConfig:
    """Test that an unreadable config file is reported, not raised."""

    @pytest.fixture
    def broken_config(self, isolated_home):
        path = isolated_home / ".config" / "dirstash" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("[general\ncontent_path = ")
        return path

    def test_items_command_reports_error(self, broken_config, root):
        result = runner.invoke(app, ["items", "list", "-c", root])

        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_logging_setup_reports_error(self, broken_config, root, monkeypatch):
        monkeypatch.setattr("dirstash.core.logging._initialized", False)

        result = runner.invoke(app, ["items", "list", "-c", root])

        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_config_init_can_replace_broken_file(self, broken_config, monkeypatch):
        monkeypatch.setattr("dirstash.core.logging._initialized", False)

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert Config.load(broken_config).similarity.max_results == 6
