"""Shared helpers: logging setup and URL utilities."""

import logging
import sys
from urllib.parse import urlparse, urlunparse

import structlog


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog for console output on stderr."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(format="%(message)s", level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def normalize_seed_url(url: str) -> str:
    """Default the scheme of a user-supplied URL to https."""
    url = url.strip()
    if url.startswith(("http://", "https://")):
        return url
    return f"https://{url}"


def hostname_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def host_variants(host: str) -> set[str]:
    """Return the host, its `www.` form, and its bare form."""
    bare = host[4:] if host.startswith("www.") else host
    return {host, bare, f"www.{bare}"}


def with_www(url: str) -> str | None:
    """Return `url` with a `www.` subdomain added, or None if already present."""
    parsed = urlparse(url)
    if not parsed.hostname or parsed.hostname.startswith("www."):
        return None
    return urlunparse(parsed._replace(netloc=f"www.{parsed.netloc}"))


def downgrade_scheme(url: str) -> str | None:
    """Return the http form of an https URL, or None for other schemes."""
    if not url.startswith("https://"):
        return None
    return "http://" + url[len("https://"):]
