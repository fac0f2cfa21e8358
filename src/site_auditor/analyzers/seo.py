"""SEO analyzer."""

from urllib.parse import urlparse

from ..models import PageRecord, Recommendation, TestOutcome, TestType
from .base import BaseAnalyzer, Check, Finding, finding, h1_count, images_missing_alt

MAX_TITLE_LENGTH = 60
MAX_META_DESCRIPTION_LENGTH = 160
MIN_WORD_COUNT = 300
MIN_INTERNAL_LINKS = 3
LONG_DOMAIN_LENGTH = 15

LIMITED_SCORE = 60
LIMITED_RECOMMENDATIONS = (
    Recommendation(
        priority="high",
        message="Ensure all pages have unique, descriptive title tags (50-60 characters)",
        impact="Critical for search engine rankings and click-through rates",
    ),
    Recommendation(
        priority="high",
        message="Add compelling meta descriptions (150-160 characters) to all pages",
        impact="Improves click-through rates from search results",
    ),
    Recommendation(
        priority="medium",
        message="Implement structured data markup for better search visibility",
        impact="Helps search engines understand your content better",
    ),
)
SHORT_DOMAIN_RECOMMENDATION = Recommendation(
    priority="low",
    message="Consider a shorter, more memorable domain name",
    impact="Improves brand recall and typing accuracy",
)


def word_count(text: str) -> int:
    return len(text.split())


def internal_links(page: PageRecord) -> list[str]:
    hostname = urlparse(page.url).hostname or ""
    return [link for link in page.links if link.startswith("/") or (hostname and hostname in link)]


def _missing_title(page: PageRecord) -> list[Finding]:
    if page.title.strip():
        return []
    return finding("Page is missing a title tag", location=page.url)


def _long_title(page: PageRecord) -> list[Finding]:
    length = len(page.title)
    if length <= MAX_TITLE_LENGTH:
        return []
    return finding(f"Title tag is {length} characters (recommended: 50-60)", length=length)


def _missing_meta_description(page: PageRecord) -> list[Finding]:
    if page.meta_description.strip():
        return []
    return finding("Page is missing a meta description", location=page.url)


def _long_meta_description(page: PageRecord) -> list[Finding]:
    length = len(page.meta_description)
    if length <= MAX_META_DESCRIPTION_LENGTH:
        return []
    return finding(f"Meta description is {length} characters (recommended: 150-160)", length=length)


def _missing_h1(page: PageRecord) -> list[Finding]:
    if h1_count(page):
        return []
    return finding("Page is missing an H1 heading", location=page.url)


def _multiple_h1(page: PageRecord) -> list[Finding]:
    count = h1_count(page)
    if count <= 1:
        return []
    return finding(f"Page has {count} H1 tags (recommended: 1)", count=count)


def _images_missing_alt(page: PageRecord) -> list[Finding]:
    count = images_missing_alt(page)
    if not count:
        return []
    return finding(f"{count} images missing alt text", count=count)


def _thin_content(page: PageRecord) -> list[Finding]:
    words = word_count(page.content_text)
    if words >= MIN_WORD_COUNT:
        return []
    return finding(f"Page has only {words} words (recommended: 300+)", word_count=words)


def _few_internal_links(page: PageRecord) -> list[Finding]:
    count = len(internal_links(page))
    if count >= MIN_INTERNAL_LINKS:
        return []
    return finding(f"Only {count} internal links found", count=count)


class SEOAnalyzer(BaseAnalyzer):
    """Checks titles, descriptions, headings, content depth and linking."""

    test_type = TestType.SEO
    checks = (
        Check(
            "missing_title",
            "high",
            25,
            _missing_title,
            Recommendation(
                priority="high",
                message="Add a descriptive title tag (50-60 characters)",
                impact="Critical for search engine rankings and click-through rates",
            ),
        ),
        Check(
            "long_title",
            "medium",
            10,
            _long_title,
            Recommendation(
                priority="medium",
                message="Shorten title tag to 50-60 characters for better display in search results",
                impact="Prevents title truncation in search engine results",
            ),
        ),
        Check(
            "missing_meta_description",
            "high",
            20,
            _missing_meta_description,
            Recommendation(
                priority="high",
                message="Add a compelling meta description (150-160 characters)",
                impact="Improves click-through rates from search results",
            ),
        ),
        Check(
            "long_meta_description",
            "medium",
            5,
            _long_meta_description,
            Recommendation(
                priority="medium",
                message="Shorten meta description to 150-160 characters",
                impact="Prevents description truncation in search results",
            ),
        ),
        Check(
            "missing_h1",
            "high",
            15,
            _missing_h1,
            Recommendation(
                priority="high",
                message="Add a descriptive H1 heading that includes target keywords",
                impact="Important ranking factor and improves content structure",
            ),
        ),
        Check(
            "multiple_h1",
            "medium",
            10,
            _multiple_h1,
            Recommendation(
                priority="medium",
                message="Use only one H1 tag per page for better SEO structure",
                impact="Improves content hierarchy and search engine understanding",
            ),
        ),
        Check(
            "images_missing_alt",
            "medium",
            10,
            _images_missing_alt,
            Recommendation(
                priority="medium",
                message="Add descriptive alt text to all images for better SEO",
                impact="Improves image search rankings and accessibility",
            ),
        ),
        Check(
            "thin_content",
            "medium",
            15,
            _thin_content,
            Recommendation(
                priority="medium",
                message="Add more valuable content to improve search rankings",
                impact="Search engines favor pages with substantial, quality content",
            ),
        ),
        Check(
            "few_internal_links",
            "low",
            5,
            _few_internal_links,
            Recommendation(
                priority="low",
                message="Add more internal links to improve site structure and user navigation",
                impact="Helps search engines understand site structure and distributes page authority",
            ),
        ),
    )

    def degraded(self, page: PageRecord) -> TestOutcome:
        """Generic advice plus what the URL alone reveals."""
        recommendations = []
        domain = urlparse(page.url).netloc
        if len(domain) > LONG_DOMAIN_LENGTH:
            recommendations.append(SHORT_DOMAIN_RECOMMENDATION)
        recommendations.extend(LIMITED_RECOMMENDATIONS)
        return self._outcome(LIMITED_SCORE, [], recommendations)
