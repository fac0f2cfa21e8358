"""Pipeline that coordinates crawling, analysis and persistence for a project."""

import asyncio
from typing import Callable

import structlog

from .aggregator import ReportAggregator
from .analyzers import BaseAnalyzer, MarketInsightExtractor, default_analyzers
from .crawler import SiteCrawler
from .errors import AnalyzerError, PipelineFatalError, UnsupportedTargetError
from .models import AnalysisSummary, MarketInsight, PageRecord, ProjectStatus, TestOutcome
from .storage import StorageBackend

logger = structlog.get_logger()

CrawlerFactory = Callable[[str], SiteCrawler]


class AnalysisPipeline:
    """
    Runs one analysis for a stored project.

    Status moves pending -> analyzing -> completed, or to failed when the
    crawl cannot produce any page. Analyzer and market failures are logged
    and never fail the run.
    """

    def __init__(
        self,
        storage: StorageBackend,
        crawler_factory: CrawlerFactory | None = None,
        analyzers: list[BaseAnalyzer] | None = None,
        market: MarketInsightExtractor | None = None,
        aggregator: ReportAggregator | None = None,
    ):
        self.storage = storage
        self.crawler_factory = crawler_factory or SiteCrawler
        self.analyzers = analyzers if analyzers is not None else default_analyzers()
        self.market = market or MarketInsightExtractor()
        self.aggregator = aggregator or ReportAggregator()

    async def run(self, project_id: str) -> AnalysisSummary:
        """
        Crawl, analyze and persist results for a project.

        Raises:
            KeyError: The project does not exist.
            UnsupportedTargetError: The project URL is a local or private host.
            PipelineFatalError: The crawl failed outright.
        """
        project = await self.storage.get_project(project_id)
        if project is None:
            raise KeyError(project_id)

        log = logger.bind(project_id=project_id, url=project.url)
        log.info("Starting analysis")
        await self.storage.set_project_status(project_id, ProjectStatus.ANALYZING)

        try:
            pages = await self._crawl(project.url)
        except UnsupportedTargetError:
            await self.storage.set_project_status(project_id, ProjectStatus.FAILED)
            raise
        except PipelineFatalError as e:
            log.error("Analysis failed", error=str(e))
            await self.storage.set_project_status(project_id, ProjectStatus.FAILED)
            raise

        try:
            for page in pages:
                await self.storage.create_page_record(project_id, page)

            outcomes = await self._run_analyzers(project_id, pages)
            insights = await self._run_market_analysis(project_id, pages)
        except Exception as e:
            log.error("Analysis failed", error=str(e))
            await self.storage.set_project_status(project_id, ProjectStatus.FAILED)
            raise PipelineFatalError(f"Analysis failed for {project.url}: {e}") from e

        await self.storage.set_project_status(project_id, ProjectStatus.COMPLETED)
        summary = self.aggregator.summarize(project_id, outcomes, insights, pages)
        log.info(
            "Analysis completed",
            pages=summary.pages_analyzed,
            overall_score=summary.overall_score,
            issues=summary.total_issues,
        )
        return summary

    async def _crawl(self, url: str) -> list[PageRecord]:
        try:
            pages = await self.crawler_factory(url).crawl()
        except UnsupportedTargetError:
            raise
        except Exception as e:
            raise PipelineFatalError(f"Crawl failed for {url}: {e}") from e

        if not pages:
            raise PipelineFatalError(f"No pages were produced for {url}")
        return pages

    def _analyze_page(self, analyzer: BaseAnalyzer, page: PageRecord) -> TestOutcome:
        try:
            return analyzer.analyze(page)
        except Exception as e:
            raise AnalyzerError(analyzer.name, page.url, e) from e

    async def _run_analyzers(self, project_id: str, pages: list[PageRecord]) -> list[TestOutcome]:
        """Run every (analyzer, page) pair in worker threads and persist the outcomes."""
        units = [(analyzer, page) for page in pages for analyzer in self.analyzers]
        results = await asyncio.gather(
            *(asyncio.to_thread(self._analyze_page, analyzer, page) for analyzer, page in units),
            return_exceptions=True,
        )

        outcomes: list[TestOutcome] = []
        for (analyzer, page), result in zip(units, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Analyzer failed",
                    analyzer=analyzer.name,
                    url=page.url,
                    error=str(result),
                )
                continue

            outcomes.append(result)
            try:
                await self.storage.create_test_outcome(project_id, page.url, result)
            except Exception as e:
                logger.error("Failed to store test outcome", analyzer=analyzer.name, url=page.url, error=str(e))

        logger.info("Page analysis complete", units=len(units), outcomes=len(outcomes))
        return outcomes

    async def _run_market_analysis(self, project_id: str, pages: list[PageRecord]) -> list[MarketInsight]:
        try:
            insights = await asyncio.to_thread(self.market.analyze, pages)
        except Exception as e:
            logger.error("Market analysis failed", error=str(e))
            return []

        stored: list[MarketInsight] = []
        for insight in insights:
            if insight.is_empty:
                logger.debug("Skipping empty market insight", dimension=insight.analysis_type.value)
                continue
            try:
                await self.storage.create_market_insight(project_id, insight)
            except Exception as e:
                logger.error(
                    "Failed to store market insight",
                    dimension=insight.analysis_type.value,
                    error=str(e),
                )
                continue
            stored.append(insight)
        return stored
