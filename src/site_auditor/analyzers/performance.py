"""Performance analyzer."""

import re

from ..models import PageRecord, Recommendation, TestOutcome, TestType
from .base import BaseAnalyzer, Check, Finding, finding

_INLINE_STYLE = re.compile(r"""style=["'][^"']*["']""", re.IGNORECASE)
_RASTER_EXTENSIONS = (".png", ".jpg", ".jpeg")

MAX_HTML_BYTES = 100_000
MAX_EXTERNAL_RESOURCES = 50
MAX_RASTER_IMAGES = 10
MAX_INLINE_STYLES = 20
MAX_STYLESHEETS = 5

LIMITED_SCORE = 70
LIMITED_RECOMMENDATIONS = (
    Recommendation(
        priority="medium",
        message="Run detailed performance analysis when website becomes accessible",
        impact="Comprehensive performance insights require full page access",
    ),
    Recommendation(
        priority="high",
        message="Implement CDN for global content delivery",
        impact="Reduces load times for users worldwide",
    ),
    Recommendation(
        priority="medium",
        message="Optimize images and implement lazy loading",
        impact="Significantly improves page load speeds",
    ),
)


def has_viewport_meta(page: PageRecord) -> bool:
    return 'name="viewport"' in page.html_content or "name='viewport'" in page.html_content


def _html_size(page: PageRecord) -> list[Finding]:
    size = max(page.page_size, len(page.html_content.encode("utf-8")))
    if size <= MAX_HTML_BYTES:
        return []
    return finding(f"HTML size is {round(size / 1024)}KB", size=size)


def _resource_count(page: PageRecord) -> list[Finding]:
    total = len(page.scripts) + len(page.stylesheets) + len(page.images)
    if total <= MAX_EXTERNAL_RESOURCES:
        return []
    return finding(f"{total} external resources detected", count=total)


def _raster_images(page: PageRecord) -> list[Finding]:
    raster = [img for img in page.images if any(ext in img.lower() for ext in _RASTER_EXTENSIONS)]
    if len(raster) <= MAX_RASTER_IMAGES:
        return []
    return finding(f"{len(raster)} potentially unoptimized images", count=len(raster))


def _inline_styles(page: PageRecord) -> list[Finding]:
    count = len(_INLINE_STYLE.findall(page.html_content))
    if count <= MAX_INLINE_STYLES:
        return []
    return finding(f"{count} inline styles detected", count=count)


def _viewport(page: PageRecord) -> list[Finding]:
    if has_viewport_meta(page):
        return []
    return finding("Missing viewport meta tag for mobile optimization", location=page.url)


def _render_blocking_css(page: PageRecord) -> list[Finding]:
    count = len(page.stylesheets)
    if count <= MAX_STYLESHEETS:
        return []
    return finding(f"{count} CSS files may block rendering", count=count)


class PerformanceAnalyzer(BaseAnalyzer):
    """Checks payload weight, request count and render-blocking patterns."""

    test_type = TestType.PERFORMANCE
    checks = (
        Check(
            "large_html_size",
            "medium",
            10,
            _html_size,
            Recommendation(
                priority="medium",
                message="Optimize HTML size by removing unnecessary code and whitespace",
                impact="Reduces initial page load time and bandwidth usage",
            ),
        ),
        Check(
            "too_many_requests",
            "medium",
            15,
            _resource_count,
            Recommendation(
                priority="medium",
                message="Reduce HTTP requests by combining files and using image sprites",
                impact="Improves page load speed by reducing network overhead",
            ),
        ),
        Check(
            "unoptimized_images",
            "medium",
            10,
            _raster_images,
            Recommendation(
                priority="medium",
                message="Optimize images using modern formats (WebP, AVIF) and appropriate compression",
                impact="Significantly reduces page load time and bandwidth usage",
            ),
        ),
        Check(
            "excessive_inline_styles",
            "low",
            5,
            _inline_styles,
            Recommendation(
                priority="low",
                message="Move inline styles to external CSS files for better caching",
                impact="Improves caching efficiency and reduces HTML size",
            ),
        ),
        Check(
            "missing_viewport_meta",
            "high",
            20,
            _viewport,
            Recommendation(
                priority="high",
                message='Add viewport meta tag: <meta name="viewport" content="width=device-width, initial-scale=1">',
                impact="Essential for proper mobile rendering and Core Web Vitals",
            ),
        ),
        Check(
            "render_blocking_css",
            "medium",
            10,
            _render_blocking_css,
            Recommendation(
                priority="medium",
                message="Inline critical CSS and defer non-critical stylesheets",
                impact="Improves First Contentful Paint and Largest Contentful Paint",
            ),
        ),
    )

    def degraded(self, page: PageRecord) -> TestOutcome:
        return self._outcome(LIMITED_SCORE, [], list(LIMITED_RECOMMENDATIONS))
