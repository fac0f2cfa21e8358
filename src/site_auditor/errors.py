"""Exception types raised across the crawl-and-analyze pipeline."""


class SiteAuditorError(Exception):
    """Base class for all site auditor errors."""


class UnsupportedTargetError(SiteAuditorError):
    """The target host is private, loopback, link-local or a `.local` name."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Cannot crawl {url}: local and private network addresses are not supported. "
            "Deploy the website to a public URL to analyze it."
        )


class FetchError(SiteAuditorError):
    """A single URL could not be fetched."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_http_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 400


class ParseError(SiteAuditorError):
    """Markup could not be parsed. Never escapes the markup extractor."""


class AnalyzerError(SiteAuditorError):
    """An analyzer raised while scoring a page."""

    def __init__(self, test_type: str, url: str, cause: BaseException):
        self.test_type = test_type
        self.url = url
        self.cause = cause
        super().__init__(f"{test_type} analysis failed for {url}: {cause}")


class PipelineFatalError(SiteAuditorError):
    """The analysis pipeline could not produce any result for a project."""
