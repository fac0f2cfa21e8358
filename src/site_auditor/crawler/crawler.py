"""Bounded breadth-first crawler that produces PageRecords."""

import asyncio
import re
from collections import deque
from urllib.parse import urlparse

import structlog

from ..config import settings
from ..errors import FetchError
from ..extractors import MarkupExtractor
from ..models import (
    FALLBACK_META_DESCRIPTION,
    SPA_META_DESCRIPTION,
    TITLE_LIMIT,
    PageRecord,
)
from ..utils import downgrade_scheme, host_variants, hostname_of, normalize_seed_url, with_www
from .fetcher import PageFetcher, RawResponse, ensure_supported_target

logger = structlog.get_logger()

MIN_BODY_LENGTH = 50

SKIP_EXTENSIONS = (
    ".pdf", ".doc", ".docx", ".zip", ".exe", ".dmg",
    ".jpg", ".jpeg", ".png", ".gif", ".svg", ".ico", ".webp",
    ".css", ".js", ".xml", ".json", ".tar", ".gz",
    ".mp3", ".mp4", ".avi", ".mov", ".webm", ".woff", ".woff2",
    ".ttf", ".eot", ".map",
)
SKIP_PATTERNS = (
    re.compile(r"mailto:", re.IGNORECASE),
    re.compile(r"tel:", re.IGNORECASE),
    re.compile(r"#"),
    re.compile(r"\?"),
)


def looks_like_html(body: str) -> bool:
    """Check that a response body is an actual HTML page."""
    if not body or len(body) < MIN_BODY_LENGTH:
        return False
    lowered = body.lower()
    return "<html" in lowered or "<!doctype" in lowered


def fallback_record(url: str) -> PageRecord:
    """Synthetic record used when no page could be crawled at all."""
    return PageRecord(
        url=url,
        title=f"Analysis for {url}"[:TITLE_LIMIT],
        meta_description=FALLBACK_META_DESCRIPTION,
        content_text=(
            "This website could not be fully crawled due to access restrictions, rate limiting, "
            "or other technical limitations. A basic analysis has been performed based on the "
            "URL structure and available public information."
        ),
        html_content=(
            "<html><head><title>Fallback Analysis</title></head><body>"
            f"<h1>Limited Analysis Mode</h1><p>Website: {url}</p></body></html>"
        ),
    )


def minimal_record(url: str, body: str) -> PageRecord:
    """Record for a seed URL that answered with something other than an HTML page."""
    return PageRecord(
        url=url,
        title=f"Website at {url}"[:TITLE_LIMIT],
        meta_description=SPA_META_DESCRIPTION,
        content_text=body[:1000],
        html_content=body[:5000],
        page_size=len(body.encode("utf-8", "ignore")),
    )


class SiteCrawler:
    """
    Polite, sequential crawler.

    One fetch is in flight at a time, with a fixed delay before every fetch
    after the first. The crawl never returns an empty list: if nothing could
    be retrieved, a fallback record is synthesized.
    """

    def __init__(
        self,
        seed_url: str,
        max_pages: int | None = None,
        links_per_page: int | None = None,
        politeness_delay: float | None = None,
        rate_limit_backoff: float | None = None,
        fetcher: PageFetcher | None = None,
        extractor: MarkupExtractor | None = None,
    ):
        self.seed_url = normalize_seed_url(seed_url)
        self.max_pages = max_pages or settings.max_pages
        self.links_per_page = links_per_page or settings.links_per_page
        self.politeness_delay = settings.politeness_delay if politeness_delay is None else politeness_delay
        self.rate_limit_backoff = settings.rate_limit_backoff if rate_limit_backoff is None else rate_limit_backoff
        self.fetcher = fetcher or PageFetcher()
        self.extractor = extractor or MarkupExtractor()

        self.visited_urls: set[str] = set()
        self.rate_limit_retried: set[str] = set()
        self.seed_candidates: set[str] = {self.seed_url}
        self.url_queue: deque[str] = deque()
        self.pages: list[PageRecord] = []
        self._fetch_count = 0

    def _is_skipped(self, url: str) -> bool:
        if any(pattern.search(url) for pattern in SKIP_PATTERNS):
            return True
        path = urlparse(url).path.lower()
        return path.endswith(SKIP_EXTENSIONS)

    def _internal_links(self, page: PageRecord) -> list[str]:
        """Pick the next same-host links to visit from a page."""
        hosts = host_variants(hostname_of(page.url))
        selected: list[str] = []

        for link in page.links:
            if len(selected) >= self.links_per_page:
                break
            if urlparse(link).scheme not in ("http", "https"):
                continue
            if hostname_of(link) not in hosts or self._is_skipped(link):
                continue
            if link in self.visited_urls or link in self.url_queue or link in selected:
                continue
            selected.append(link)

        return selected

    def _alternate_url(self, url: str) -> str | None:
        """First untried alternate form of a failing seed URL."""
        for candidate in (with_www(url), downgrade_scheme(url)):
            if candidate and candidate not in self.visited_urls:
                return candidate
        return None

    def _is_seed_attempt(self, url: str) -> bool:
        return not self.pages and url in self.seed_candidates

    async def _fetch(self, url: str) -> RawResponse:
        if self._fetch_count and self.politeness_delay:
            await asyncio.sleep(self.politeness_delay)
        self._fetch_count += 1
        return await self.fetcher.fetch(url)

    async def _fetch_with_retry(self, url: str) -> RawResponse:
        """Fetch a URL, retrying once after a back-off window on HTTP 429."""
        try:
            return await self._fetch(url)
        except FetchError as e:
            if not e.is_rate_limited or url in self.rate_limit_retried:
                raise
            self.rate_limit_retried.add(url)
            logger.info("Rate limited, retrying after back-off", url=url, delay=self.rate_limit_backoff)
            await asyncio.sleep(self.rate_limit_backoff)
            return await self._fetch(url)

    def _handle_fetch_error(self, url: str, error: FetchError) -> None:
        logger.info("Failed to fetch page", url=url, error=error.reason, status=error.status_code)

        if not error.is_http_error or error.is_rate_limited or not self._is_seed_attempt(url):
            return

        alternate = self._alternate_url(url)
        if alternate:
            logger.info("Retrying seed with alternate URL", url=url, alternate=alternate)
            self.seed_candidates.add(alternate)
            self.url_queue.appendleft(alternate)

    def _handle_response(self, url: str, response: RawResponse) -> None:
        if not looks_like_html(response.text):
            if self._is_seed_attempt(url):
                logger.info("Non-HTML seed response, creating minimal record", url=response.url)
                self.pages.append(minimal_record(response.url, response.text))
            else:
                logger.debug("Skipping non-HTML response", url=response.url)
            return

        page = self.extractor.parse(response.url, response.text, page_size=response.size)
        self.pages.append(page)
        self.visited_urls.add(response.url)
        logger.info("Crawled page", url=response.url, title=page.title)

        for link in self._internal_links(page):
            self.url_queue.append(link)

    async def crawl(self) -> list[PageRecord]:
        """
        Crawl from the seed URL.

        Returns:
            Between 1 and `max_pages` PageRecords.

        Raises:
            UnsupportedTargetError: The seed points at a local or private host.
        """
        ensure_supported_target(self.seed_url)
        logger.info("Starting crawl", seed_url=self.seed_url, max_pages=self.max_pages)

        self.url_queue.append(self.seed_url)

        try:
            while self.url_queue and len(self.pages) < self.max_pages:
                url = self.url_queue.popleft()
                if url in self.visited_urls:
                    continue
                self.visited_urls.add(url)

                logger.info("Crawling page", url=url)
                try:
                    response = await self._fetch_with_retry(url)
                except FetchError as e:
                    self._handle_fetch_error(url, e)
                    continue

                self._handle_response(url, response)
        finally:
            await self.fetcher.stop()

        if not self.pages:
            logger.warning("No pages crawled, creating fallback record", url=self.seed_url)
            self.pages.append(fallback_record(self.seed_url))

        logger.info(
            "Crawl completed",
            pages_crawled=len(self.pages),
            urls_visited=len(self.visited_urls),
        )
        return self.pages
