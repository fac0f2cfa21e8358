"""Tests for the storage backends."""

import json

import pytest

from site_auditor.models import AnalysisType, MarketInsight, PageRecord, ProjectStatus, TestOutcome, TestType
from site_auditor.storage import MARKET_INSIGHTS, PAGES, TEST_RESULTS, JsonStorage, MemoryStorage


@pytest.fixture(params=["memory", "json"])
def storage(request, tmp_path):
    if request.param == "memory":
        return MemoryStorage()
    return JsonStorage(tmp_path / "data")


class TestStorageBackends:
    """Behaviour shared by every storage backend."""

    @pytest.mark.asyncio
    async def test_project_lifecycle(self, storage):
        """Test creating a project and moving it through statuses."""
        project = await storage.create_project("Example", "https://example.com", "A test site")

        assert project.status == ProjectStatus.PENDING

        await storage.set_project_status(project.id, ProjectStatus.ANALYZING)
        loaded = await storage.get_project(project.id)

        assert loaded.status == ProjectStatus.ANALYZING
        assert loaded.description == "A test site"

    @pytest.mark.asyncio
    async def test_unknown_project(self, storage):
        """Test lookups and status updates for missing projects."""
        assert await storage.get_project("missing") is None

        with pytest.raises(KeyError):
            await storage.set_project_status("missing", ProjectStatus.FAILED)

    @pytest.mark.asyncio
    async def test_rows_round_trip(self, storage):
        """Test that stored rows can be queried back per kind."""
        project = await storage.create_project("Example", "https://example.com")
        await storage.create_page_record(project.id, PageRecord(url="https://example.com", title="Home"))
        await storage.create_test_outcome(project.id, "https://example.com", TestOutcome(type=TestType.SEO, score=60))
        await storage.create_market_insight(
            project.id, MarketInsight(AnalysisType.PRICING, {"model": "subscription"}, 0.4)
        )

        pages = await storage.query(project.id, PAGES)
        results = await storage.query(project.id, TEST_RESULTS)
        insights = await storage.query(project.id, MARKET_INSIGHTS)

        assert pages[0]["title"] == "Home"
        assert results[0]["page_url"] == "https://example.com"
        assert results[0]["status"] == "warning"
        assert insights[0]["insights"] == {"model": "subscription"}

    @pytest.mark.asyncio
    async def test_rejects_empty_insight(self, storage):
        """Test that empty market insights are refused."""
        project = await storage.create_project("Example", "https://example.com")

        with pytest.raises(ValueError):
            await storage.create_market_insight(project.id, MarketInsight(AnalysisType.COMPETITOR))

        assert await storage.query(project.id, MARKET_INSIGHTS) == []

    @pytest.mark.asyncio
    async def test_unknown_row_kind(self, storage):
        """Test that querying an unknown row kind fails."""
        with pytest.raises(ValueError):
            await storage.query("any", "screenshots")


class TestJsonStorage:
    """Test cases specific to JsonStorage."""

    @pytest.mark.asyncio
    async def test_directory_layout(self, tmp_path):
        """Test one directory per project with JSON files."""
        storage = JsonStorage(tmp_path)
        project = await storage.create_project("Example", "https://example.com")
        await storage.create_page_record(project.id, PageRecord(url="https://example.com"))

        project_dir = tmp_path / project.id
        assert json.loads((project_dir / "project.json").read_text())["url"] == "https://example.com"
        assert len(json.loads((project_dir / "pages.json").read_text())) == 1

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        """Test that a second store instance sees earlier writes."""
        project = await JsonStorage(tmp_path).create_project("Example", "https://example.com")

        loaded = await JsonStorage(tmp_path).get_project(project.id)

        assert loaded.name == "Example"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("project_id", ["../outside", "/etc", "..", "ABCDEF", "0" * 31])
    async def test_rejects_ids_outside_data_dir(self, tmp_path, project_id):
        """Test that ids not produced by the store never map to a path."""
        storage = JsonStorage(tmp_path / "data")
        (tmp_path / "outside").mkdir()
        (tmp_path / "outside" / "project.json").write_text(json.dumps({"id": "x"}))

        assert await storage.get_project(project_id) is None
        with pytest.raises(KeyError):
            storage.get_project_dir(project_id)
        with pytest.raises(KeyError):
            await storage.create_page_record(project_id, PageRecord(url="https://example.com"))
