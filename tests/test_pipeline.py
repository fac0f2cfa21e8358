"""Tests for the analysis pipeline and report aggregation."""

import pytest

from site_auditor.aggregator import ReportAggregator
from site_auditor.analyzers import BaseAnalyzer, SEOAnalyzer, SecurityAnalyzer
from site_auditor.errors import PipelineFatalError, UnsupportedTargetError
from site_auditor.models import (
    AnalysisType,
    Issue,
    MarketInsight,
    PageRecord,
    ProjectStatus,
    TestOutcome,
    TestType,
)
from site_auditor.pipeline import AnalysisPipeline
from site_auditor.storage import MARKET_INSIGHTS, PAGES, TEST_RESULTS, MemoryStorage


class RecordingStorage(MemoryStorage):
    """Memory storage that remembers every status transition."""

    def __init__(self):
        super().__init__()
        self.transitions: list[ProjectStatus] = []

    async def set_project_status(self, project_id, status):
        self.transitions.append(status)
        await super().set_project_status(project_id, status)


class ExplodingAnalyzer(BaseAnalyzer):
    test_type = TestType.UI_UX

    def analyze(self, page):
        raise RuntimeError("analyzer crashed")


class FailingCrawler:
    def __init__(self, url):
        self.url = url

    async def crawl(self):
        raise RuntimeError("network stack exploded")


class EmptyCrawler:
    def __init__(self, url):
        self.url = url

    async def crawl(self):
        return []


SAAS_BODY = (
    "<h1>Analytics for teams</h1><p>Subscription analytics dashboard for every business. "
    "Plans from $29 monthly.</p>"
)


@pytest.fixture
def storage():
    return RecordingStorage()


class TestAnalysisPipeline:
    """Test cases for AnalysisPipeline."""

    @pytest.mark.asyncio
    async def test_successful_run(self, storage, make_site, page_html):
        """Test a full run persists pages, outcomes and insights."""
        site = make_site({"https://example.com": (200, page_html("Analytics", SAAS_BODY))})
        project = await storage.create_project("Example", "https://example.com")
        pipeline = AnalysisPipeline(storage, crawler_factory=site.crawler)

        summary = await pipeline.run(project.id)

        assert storage.transitions == [ProjectStatus.ANALYZING, ProjectStatus.COMPLETED]
        assert summary.pages_analyzed == 1
        assert set(summary.category_scores) == {t.value for t in TestType}
        assert summary.degraded is False
        assert len(await storage.query(project.id, PAGES)) == 1
        assert len(await storage.query(project.id, TEST_RESULTS)) == 5
        insights = await storage.query(project.id, MARKET_INSIGHTS)
        assert {row["analysis_type"] for row in insights} == set(summary.market_dimensions)
        assert "competitor" in summary.market_dimensions

    @pytest.mark.asyncio
    async def test_analyzer_failure_is_isolated(self, storage, make_site, page_html):
        """Test a crashing analyzer yields no outcome without stopping the others."""
        site = make_site({"https://example.com": (200, page_html("Home", "<p>Hello</p>"))})
        project = await storage.create_project("Example", "https://example.com")
        pipeline = AnalysisPipeline(
            storage,
            crawler_factory=site.crawler,
            analyzers=[SEOAnalyzer(), ExplodingAnalyzer(), SecurityAnalyzer()],
        )

        summary = await pipeline.run(project.id)

        rows = await storage.query(project.id, TEST_RESULTS)
        assert sorted(row["test_type"] for row in rows) == ["security", "seo"]
        assert set(summary.category_scores) == {"security", "seo"}
        assert storage.transitions[-1] == ProjectStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_empty_insights_not_persisted(self, storage, make_site, page_html):
        """Test that dimensions without signals are never stored."""
        site = make_site({"https://example.com": (200, page_html("Hi", "<p>Hello world</p>"))})
        project = await storage.create_project("Example", "https://example.com")

        summary = await AnalysisPipeline(storage, crawler_factory=site.crawler).run(project.id)

        assert await storage.query(project.id, MARKET_INSIGHTS) == []
        assert summary.market_dimensions == []

    @pytest.mark.asyncio
    async def test_unreachable_site_is_degraded(self, storage, make_site):
        """Test that an unreachable site still completes with the fallback record."""
        site = make_site({})
        project = await storage.create_project("Example", "https://example.com")

        summary = await AnalysisPipeline(storage, crawler_factory=site.crawler).run(project.id)

        assert summary.degraded is True
        assert summary.pages_analyzed == 1
        assert summary.category_scores["seo"] == 60
        assert storage.transitions[-1] == ProjectStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_private_target_fails_project(self, storage, make_site):
        """Test that a local target marks the project failed and surfaces the error."""
        site = make_site({})
        project = await storage.create_project("Local", "http://192.168.1.5")

        with pytest.raises(UnsupportedTargetError):
            await AnalysisPipeline(storage, crawler_factory=site.crawler).run(project.id)

        assert storage.transitions == [ProjectStatus.ANALYZING, ProjectStatus.FAILED]
        assert site.requests == []

    @pytest.mark.asyncio
    async def test_crawl_crash_is_fatal(self, storage):
        """Test that an unexpected crawl failure becomes a fatal pipeline error."""
        project = await storage.create_project("Example", "https://example.com")

        with pytest.raises(PipelineFatalError):
            await AnalysisPipeline(storage, crawler_factory=FailingCrawler).run(project.id)

        assert storage.transitions[-1] == ProjectStatus.FAILED

    @pytest.mark.asyncio
    async def test_zero_pages_is_fatal(self, storage):
        """Test that a crawl returning nothing fails the project."""
        project = await storage.create_project("Example", "https://example.com")

        with pytest.raises(PipelineFatalError):
            await AnalysisPipeline(storage, crawler_factory=EmptyCrawler).run(project.id)

        assert (await storage.get_project(project.id)).status == ProjectStatus.FAILED

    @pytest.mark.asyncio
    async def test_unknown_project(self, storage):
        """Test that running an unknown project raises KeyError."""
        with pytest.raises(KeyError):
            await AnalysisPipeline(storage).run("missing")


class TestReportAggregator:
    """Test cases for ReportAggregator."""

    def test_summarize(self):
        """Test averages, totals and verdict counts."""
        outcomes = [
            TestOutcome(type=TestType.SEO, score=60, issues=(Issue("high", "missing_h1", "No H1"),)),
            TestOutcome(type=TestType.SEO, score=85),
            TestOutcome(
                type=TestType.SECURITY,
                score=40,
                issues=(Issue("high", "insecure_protocol", "No HTTPS"), Issue("medium", "inline_scripts", "Inline")),
            ),
        ]
        insights = [
            MarketInsight(AnalysisType.PRICING, {"model": "subscription"}, 0.4),
            MarketInsight(AnalysisType.FEATURES),
        ]
        pages = [PageRecord(url="https://example.com"), PageRecord(url="https://example.com/about")]

        summary = ReportAggregator().summarize("p1", outcomes, insights, pages)

        assert summary.category_scores == {"seo": 72, "security": 40}
        assert summary.overall_score == 62
        assert summary.total_issues == 3
        assert summary.high_severity_issues == 2
        assert (summary.passed, summary.warnings, summary.failed) == (1, 1, 1)
        assert summary.market_dimensions == ["pricing"]
        assert summary.pages_analyzed == 2

    def test_summarize_nothing(self):
        """Test that an empty run summarizes to zeros."""
        summary = ReportAggregator().summarize("p1", [], [], [])

        assert summary.overall_score == 0
        assert summary.category_scores == {}
