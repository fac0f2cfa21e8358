"""Markup extractor: turns raw HTML into a PageRecord."""

import re
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Comment

from ..errors import ParseError
from ..models import (
    CONTENT_TEXT_LIMIT,
    FORM_HTML_LIMIT,
    HTML_CONTENT_LIMIT,
    MAX_IMAGES,
    MAX_LINKS,
    MAX_SCRIPTS,
    MAX_STYLESHEETS,
    META_DESCRIPTION_LIMIT,
    TITLE_LIMIT,
    FormRecord,
    PageRecord,
)

logger = structlog.get_logger()

_WHITESPACE = re.compile(r"\s+")
_DESCRIPTION = re.compile(r"^description$", re.IGNORECASE)
_SKIPPED_LINK_PREFIXES = ("javascript:", "mailto:", "tel:", "#")
_HIDDEN_TEXT_TAGS = ["script", "style", "noscript"]
_BODY_REGION = re.compile(r"<body[^>]*>([\s\S]*?)</body>", re.IGNORECASE)
_FORM_CLOSE = re.compile(r"</form\s*>", re.IGNORECASE)

# Below this many characters of visible text, the raw <body> region is parsed on its own.
MIN_CONTENT_LENGTH = 100


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _resolve(base_url: str, value) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return urljoin(base_url, value.strip())
    except ValueError:
        return None


def _resolve_all(base_url: str, values) -> list[str]:
    return [url for url in (_resolve(base_url, value) for value in values) if url]


def _line_offsets(html: str) -> list[int]:
    """Offset of the first character of each line in `html`."""
    return [0] + [match.end() for match in re.finditer("\n", html)]


def _strip_to_text(soup: BeautifulSoup) -> str:
    for element in soup(_HIDDEN_TEXT_TAGS):
        element.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    return collapse_whitespace(soup.get_text(" "))


def _is_stylesheet(tag) -> bool:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return "stylesheet" in (value.lower() for value in rel)


class MarkupExtractor:
    """Builds PageRecords from raw markup. Never raises."""

    def parse(self, url: str, html: str, page_size: int | None = None) -> PageRecord:
        """
        Parse a page.

        Args:
            url: Absolute (post-redirect) address of the page.
            html: Raw markup as fetched.
            page_size: Byte size of the full payload, if known.

        Returns:
            A PageRecord with every collection capped. On any parsing failure a
            degraded record is returned instead.
        """
        size = page_size if page_size is not None else len(html.encode("utf-8", "ignore"))
        try:
            soup = self._soup(url, html)
            return self._build_record(url, html, size, soup)
        except Exception as e:
            logger.warning("Failed to parse page", url=url, error=str(e))
            return PageRecord(
                url=url,
                title=f"Website at {url}"[:TITLE_LIMIT],
                content_text="Unable to parse page content",
                html_content=html[:1000],
                page_size=size,
            )

    def _soup(self, url: str, html: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(html, "html.parser")
        except Exception as e:
            raise ParseError(f"Could not parse markup for {url}: {e}") from e

    def _title(self, url: str, soup: BeautifulSoup) -> str:
        title_tag = soup.find("title")
        title = collapse_whitespace(title_tag.get_text()) if title_tag else ""
        if not title:
            h1 = soup.find("h1")
            title = collapse_whitespace(h1.get_text()) if h1 else ""
        return title or f"Page at {url}"

    def _meta_description(self, soup: BeautifulSoup) -> str:
        meta = soup.find("meta", attrs={"name": _DESCRIPTION})
        content = meta.get("content") if meta else None
        return collapse_whitespace(content) if isinstance(content, str) else ""

    def _links(self, url: str, soup: BeautifulSoup) -> list[str]:
        hrefs = [
            tag["href"].strip()
            for tag in soup.find_all("a", href=True)
            if not tag["href"].strip().lower().startswith(_SKIPPED_LINK_PREFIXES)
        ]
        return _resolve_all(url, hrefs)

    def _form_markup(self, html: str, form, line_offsets: list[int]) -> str:
        """Slice the form's source text, from its opening tag to the next `</form>`."""
        start = line_offsets[form.sourceline - 1] + form.sourcepos
        close = _FORM_CLOSE.search(html, start)
        return html[start:close.end() if close else len(html)]

    def _forms(self, html: str, soup: BeautifulSoup) -> list[FormRecord]:
        forms = []
        line_offsets = _line_offsets(html)
        for index, form in enumerate(soup.find_all("form")):
            method = (form.get("method") or "").strip().upper()
            forms.append(
                FormRecord(
                    id=index,
                    html=self._form_markup(html, form, line_offsets)[:FORM_HTML_LIMIT],
                    method=method if method in ("GET", "POST") else "GET",
                    action=form.get("action") or "",
                )
            )
        return forms

    def _visible_text(self, url: str, html: str, soup: BeautifulSoup) -> str:
        """
        Strip hidden elements and comments, then collapse the remaining text.

        An unclosed `<script>` or `<style>` swallows the rest of the document,
        so short results are retried on the raw `<body>` region alone.
        """
        text = _strip_to_text(soup)
        if len(text) < MIN_CONTENT_LENGTH:
            body = _BODY_REGION.search(html)
            body_text = _strip_to_text(self._soup(url, body.group(1))) if body else ""
            if body_text:
                text = body_text
        return text

    def _build_record(self, url: str, html: str, size: int, soup: BeautifulSoup) -> PageRecord:
        title = self._title(url, soup)
        images = _resolve_all(url, (tag.get("src") for tag in soup.find_all("img")))
        scripts = _resolve_all(url, (tag.get("src") for tag in soup.find_all("script")))
        stylesheets = _resolve_all(
            url, (tag.get("href") for tag in soup.find_all("link") if _is_stylesheet(tag))
        )
        links = self._links(url, soup)
        forms = self._forms(html, soup)

        # Decomposes hidden elements, so it runs after every other extraction.
        content_text = self._visible_text(url, html, soup)

        return PageRecord(
            url=url,
            title=title[:TITLE_LIMIT],
            meta_description=self._meta_description(soup)[:META_DESCRIPTION_LIMIT],
            content_text=content_text[:CONTENT_TEXT_LIMIT],
            html_content=html[:HTML_CONTENT_LIMIT],
            images=tuple(images[:MAX_IMAGES]),
            links=tuple(links[:MAX_LINKS]),
            forms=tuple(forms),
            scripts=tuple(scripts[:MAX_SCRIPTS]),
            stylesheets=tuple(stylesheets[:MAX_STYLESHEETS]),
            page_size=size,
        )
