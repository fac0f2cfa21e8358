"""Tests for data models."""

from datetime import datetime

from site_auditor.crawler.crawler import fallback_record
from site_auditor.models import (
    AnalysisType,
    FormRecord,
    Issue,
    MarketInsight,
    PageRecord,
    Project,
    ProjectStatus,
    Recommendation,
    TestOutcome,
    TestStatus,
    TestType,
)


class TestTestStatus:
    """Test cases for the score to status mapping."""

    def test_thresholds(self):
        """Test the passed and warning boundaries."""
        assert TestStatus.from_score(100) == TestStatus.PASSED
        assert TestStatus.from_score(80) == TestStatus.PASSED
        assert TestStatus.from_score(79) == TestStatus.WARNING
        assert TestStatus.from_score(60) == TestStatus.WARNING
        assert TestStatus.from_score(59) == TestStatus.FAILED
        assert TestStatus.from_score(0) == TestStatus.FAILED


class TestPageRecord:
    """Test cases for PageRecord."""

    def test_default_values(self):
        """Test default values are empty."""
        page = PageRecord(url="https://example.com")

        assert page.title == ""
        assert page.links == ()
        assert page.forms == ()
        assert page.page_size == 0
        assert page.is_fallback is False

    def test_fallback_detection(self):
        """Test that the synthetic fallback record is recognised."""
        page = fallback_record("https://example.com")

        assert page.is_fallback is True
        assert page.title == "Analysis for https://example.com"

    def test_to_dict(self):
        """Test serialization turns tuples into lists."""
        page = PageRecord(
            url="https://example.com",
            links=("https://example.com/about",),
            forms=(FormRecord(id=0, html="<form></form>", method="POST", action="/login"),),
        )

        data = page.to_dict()

        assert data["links"] == ["https://example.com/about"]
        assert data["forms"] == [{"id": 0, "html": "<form></form>", "method": "POST", "action": "/login"}]


class TestTestOutcome:
    """Test cases for TestOutcome."""

    def test_status_follows_score(self):
        """Test status is derived from the score."""
        assert TestOutcome(type=TestType.SEO, score=60).status == TestStatus.WARNING
        assert TestOutcome(type=TestType.SEO, score=85).status == TestStatus.PASSED

    def test_to_dict(self):
        """Test serialization flattens issue details."""
        outcome = TestOutcome(
            type=TestType.SECURITY,
            score=70,
            issues=(Issue("high", "insecure_protocol", "Website is not using HTTPS", {"location": "http://a.com"}),),
            recommendations=(Recommendation("high", "Use HTTPS", "Protects users"),),
        )

        data = outcome.to_dict()

        assert data["test_type"] == "security"
        assert data["status"] == "warning"
        assert data["issues"][0]["location"] == "http://a.com"
        assert data["issues"][0]["type"] == "insecure_protocol"
        assert data["recommendations"][0]["priority"] == "high"


class TestMarketInsight:
    """Test cases for MarketInsight."""

    def test_empty_insight(self):
        """Test that an insight without data is empty with the floor confidence."""
        insight = MarketInsight(AnalysisType.PRICING)

        assert insight.is_empty is True
        assert insight.confidence_score == 0.1


class TestProject:
    """Test cases for Project."""

    def test_round_trip(self):
        """Test projects survive a dict round trip."""
        project = Project(id="abc", name="Example", url="https://example.com", status=ProjectStatus.ANALYZING)

        restored = Project.from_dict(project.to_dict())

        assert restored.id == "abc"
        assert restored.status == ProjectStatus.ANALYZING
        assert isinstance(restored.created_at, datetime)
        assert restored.created_at == project.created_at
