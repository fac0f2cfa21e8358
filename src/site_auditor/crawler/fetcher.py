"""HTTP page fetcher with a browser-like request profile."""

import asyncio
import ipaddress
import socket
from dataclasses import dataclass, field
from urllib.parse import urlparse

import httpx
import structlog

from ..config import settings
from ..errors import FetchError, UnsupportedTargetError

logger = structlog.get_logger()

LOCAL_HOSTNAMES = ("localhost", "localhost.localdomain", "ip6-localhost", "ip6-loopback")
LOCAL_SUFFIXES = (".local", ".localhost")


def _browser_headers(user_agent: str, accept_language: str) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
            "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
        ),
        "Accept-Language": accept_language,
        "Accept-Encoding": "gzip, deflate",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Ch-Ua-Platform": '"Windows"',
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
        "Upgrade-Insecure-Requests": "1",
    }


@dataclass(frozen=True)
class FetcherConfig:
    """Immutable request profile for the page fetcher."""

    timeout: float = 15.0
    follow_redirects: bool = True
    max_redirects: int = 10
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls) -> "FetcherConfig":
        return cls(
            timeout=settings.request_timeout,
            headers=_browser_headers(settings.user_agent, settings.accept_language),
        )


@dataclass(frozen=True)
class RawResponse:
    """A successful HTTP response."""

    url: str
    status_code: int
    text: str
    content_type: str = ""
    size: int = 0


def _parse_address(host: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Parse a literal address, including shorthand IPv4 forms like `127.1` or `0x7f000001`."""
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        pass
    try:
        return ipaddress.IPv4Address(socket.inet_aton(host))
    except (OSError, ValueError):
        return None


def is_unsupported_host(hostname: str) -> bool:
    """Check whether a hostname points at a local or private network target."""
    host = hostname.lower().strip("[]").rstrip(".")
    if not host:
        return False
    if host in LOCAL_HOSTNAMES or host.endswith(LOCAL_SUFFIXES):
        return True

    address = _parse_address(host)
    if address is None:
        return False

    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_unspecified
        or address.is_reserved
    )


def ensure_supported_target(url: str) -> None:
    """Raise UnsupportedTargetError for local/private targets. Performs no I/O."""
    hostname = urlparse(url).hostname or ""
    if is_unsupported_host(hostname):
        raise UnsupportedTargetError(url)


class PageFetcher:
    """Issues single bounded GET requests."""

    def __init__(
        self,
        config: FetcherConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or FetcherConfig.from_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Initialize HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=False,
                headers=self.config.headers,
                transport=self._transport,
            )

    async def stop(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PageFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def _get(self, url: str) -> httpx.Response:
        """GET `url`, following redirects one hop at a time. Each hop is checked before it is sent."""
        response = await self._client.get(url)
        hops = 0
        while self.config.follow_redirects and response.next_request is not None:
            target = response.next_request.url
            if is_unsupported_host(target.host):
                raise FetchError(url, f"Redirected to unsupported target {target}")
            hops += 1
            if hops > self.config.max_redirects:
                raise FetchError(url, "Too many redirects")
            response = await self._client.send(response.next_request)
        return response

    async def fetch(self, url: str) -> RawResponse:
        """
        Fetch a URL.

        Raises:
            UnsupportedTargetError: The host is local or private.
            FetchError: Non-2xx status, timeout, or transport failure.
        """
        ensure_supported_target(url)
        await self.start()

        try:
            response = await asyncio.wait_for(self._get(url), timeout=self.config.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise FetchError(url, "Request timed out")
        except httpx.HTTPError as e:
            raise FetchError(url, f"Connection failed: {e}")

        if response.status_code >= 400:
            logger.warning("HTTP error response", url=url, status=response.status_code)
            raise FetchError(
                url,
                f"HTTP {response.status_code} {response.reason_phrase}".strip(),
                status_code=response.status_code,
            )

        return RawResponse(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
            content_type=response.headers.get("content-type", ""),
            size=len(response.content),
        )
