"""Shared fixtures: a scripted fake website served through httpx.MockTransport."""

from typing import Callable

import httpx
import pytest

from site_auditor.crawler import FetcherConfig, PageFetcher, SiteCrawler

Route = tuple[int, str]


def html_page(title: str = "Home", body: str = "", head: str = "") -> str:
    return (
        "<!DOCTYPE html><html><head>"
        f"<title>{title}</title>{head}"
        f"</head><body>{body}</body></html>"
    )


class FakeSite:
    """
    Serves scripted responses keyed by URL.

    A route value is either one `(status, body)` pair, served on every
    request, or a list of pairs served in order (the last one repeats).
    Unknown URLs answer 404.
    """

    def __init__(self, routes: dict[str, Route | list[Route]] | None = None, fallback: Callable | None = None):
        self.routes = {self._key(url): value for url, value in (routes or {}).items()}
        self.fallback = fallback
        self.requests: list[str] = []
        self._served: dict[str, int] = {}

    @staticmethod
    def _key(url: str) -> str:
        return url.rstrip("/")

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = self._key(str(request.url))
        self.requests.append(key)

        route = self.routes.get(key)
        if route is None and self.fallback is not None:
            route = self.fallback(key)
        if route is None:
            return httpx.Response(404, text="Not found")

        if isinstance(route, list):
            index = self._served.get(key, 0)
            self._served[key] = index + 1
            route = route[min(index, len(route) - 1)]

        status, body = route
        return httpx.Response(status, text=body, headers={"content-type": "text/html"})

    def requests_for(self, url: str) -> int:
        return self.requests.count(self._key(url))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def fetcher(self) -> PageFetcher:
        return PageFetcher(FetcherConfig(timeout=5.0), transport=self.transport)

    def crawler(self, seed_url: str, **kwargs) -> SiteCrawler:
        kwargs.setdefault("politeness_delay", 0)
        kwargs.setdefault("rate_limit_backoff", 0)
        return SiteCrawler(seed_url, fetcher=self.fetcher(), **kwargs)


@pytest.fixture
def make_site() -> Callable[..., FakeSite]:
    return FakeSite


@pytest.fixture
def page_html() -> Callable[..., str]:
    return html_page
