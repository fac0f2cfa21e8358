"""Tests for the analyze trigger API."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from site_auditor.api import create_app
from site_auditor.models import ProjectStatus
from site_auditor.pipeline import AnalysisPipeline
from site_auditor.storage import JsonStorage, MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def client(storage, make_site, page_html):
    site = make_site({"https://example.com": (200, page_html("Home", "<h1>Welcome</h1><p>Hello</p>"))})
    pipeline = AnalysisPipeline(storage, crawler_factory=site.crawler)
    return TestClient(create_app(storage, pipeline))


def create_project(storage, url):
    return asyncio.run(storage.create_project("Example", url))


class TestAnalyzeEndpoint:
    """Test cases for POST /api/analyze."""

    def test_missing_project_id(self, client):
        """Test that a missing id is a client error."""
        response = client.post("/api/analyze", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Project ID is required"}

    def test_malformed_body(self, client):
        """Test that an invalid body is a client error."""
        response = client.post("/api/analyze", json={"project_id": {"nested": True}})

        assert response.status_code == 400

    def test_unknown_project(self, client):
        """Test that an unknown project is not found."""
        response = client.post("/api/analyze", json={"project_id": "missing"})

        assert response.status_code == 404
        assert response.json() == {"error": "Project not found"}

    def test_successful_analysis(self, client, storage):
        """Test a completed analysis returns the summary."""
        project = create_project(storage, "https://example.com")

        response = client.post("/api/analyze", json={"project_id": project.id})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Analysis completed"
        assert body["summary"]["project_id"] == project.id
        assert body["summary"]["pages_analyzed"] == 1
        assert storage.projects[project.id].status == ProjectStatus.COMPLETED

    def test_private_target_fails(self, client, storage):
        """Test that a local target is reported as a failed analysis."""
        project = create_project(storage, "http://localhost:3000")

        response = client.post("/api/analyze", json={"project_id": project.id})

        assert response.status_code == 500
        assert response.json() == {"error": "Analysis failed"}
        assert storage.projects[project.id].status == ProjectStatus.FAILED

    def test_path_like_id_on_json_store(self, tmp_path):
        """Test that a path-like id is not found on the file-backed store."""
        (tmp_path / "outside").mkdir()
        (tmp_path / "outside" / "project.json").write_text('{"id": "outside"}')
        client = TestClient(create_app(JsonStorage(tmp_path / "data")))

        response = client.post("/api/analyze", json={"project_id": "../outside"})

        assert response.status_code == 404
        assert response.json() == {"error": "Project not found"}


class TestHealthEndpoint:
    """Test cases for GET /api/health."""

    def test_health(self, client):
        """Test the liveness probe."""
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
