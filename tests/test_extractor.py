"""Tests for the markup extractor."""

from site_auditor.errors import ParseError
from site_auditor.extractors import MarkupExtractor
from site_auditor.models import (
    CONTENT_TEXT_LIMIT,
    FORM_HTML_LIMIT,
    HTML_CONTENT_LIMIT,
    MAX_IMAGES,
    MAX_LINKS,
    TITLE_LIMIT,
)


class TestMarkupExtractor:
    """Test cases for MarkupExtractor."""

    def setup_method(self):
        self.extractor = MarkupExtractor()

    def test_basic_fields(self):
        """Test title, meta description and text extraction."""
        html = """
        <html>
            <head>
                <title>  Test   Page </title>
                <meta name="description" content="A short description">
                <style>.test { color: red; }</style>
            </head>
            <body>
                <script>console.log('test');</script>
                <!-- hidden comment -->
                <h1>Hello World</h1>
                <p>This is a test paragraph.</p>
                <noscript>Enable JavaScript</noscript>
            </body>
        </html>
        """

        page = self.extractor.parse("https://example.com", html)

        assert page.title == "Test Page"
        assert page.meta_description == "A short description"
        assert "Hello World" in page.content_text
        assert "This is a test paragraph." in page.content_text
        assert "console.log" not in page.content_text
        assert "color: red" not in page.content_text
        assert "hidden comment" not in page.content_text
        assert "Enable JavaScript" not in page.content_text
        assert page.page_size == len(html.encode("utf-8"))

    def test_title_falls_back_to_h1(self):
        """Test that the first H1 is used when there is no title."""
        page = self.extractor.parse("https://example.com", "<html><body><h1>Welcome</h1><h1>Second</h1></body></html>")

        assert page.title == "Welcome"

    def test_title_falls_back_to_url(self):
        """Test the last-resort title."""
        page = self.extractor.parse("https://example.com", "<html><body><p>No headings</p></body></html>")

        assert page.title == "Page at https://example.com"

    def test_resolves_and_filters_links(self):
        """Test that links are absolute and non-navigational links are dropped."""
        html = """
        <html><body>
            <a href="/about">About</a>
            <a href="contact">Contact</a>
            <a href="https://external.com/page">External</a>
            <a href="mailto:test@test.com">Email</a>
            <a href="tel:+123456">Call</a>
            <a href="javascript:void(0)">Click</a>
            <a href="#section">Jump</a>
            <a>No href</a>
        </body></html>
        """

        page = self.extractor.parse("https://example.com/docs/", html)

        assert page.links == (
            "https://example.com/about",
            "https://example.com/docs/contact",
            "https://external.com/page",
        )

    def test_resources(self):
        """Test images, scripts and stylesheets are resolved."""
        html = """
        <html><head>
            <link rel="stylesheet" href="/main.css">
            <link rel="icon" href="/favicon.ico">
            <script src="https://cdn.example.com/app.js"></script>
            <script>inline()</script>
        </head><body>
            <img src="/logo.png" alt="Logo">
            <img alt="No source">
        </body></html>
        """

        page = self.extractor.parse("https://example.com", html)

        assert page.stylesheets == ("https://example.com/main.css",)
        assert page.scripts == ("https://cdn.example.com/app.js",)
        assert page.images == ("https://example.com/logo.png",)

    def test_forms(self):
        """Test that forms keep their raw markup, method and action."""
        html = """
        <html><body>
            <form method="post" action="/login"><input name="user"><button>Go</button></form>
            <form action="/search"><input type="search" name="q"></form>
        </body></html>
        """

        page = self.extractor.parse("https://example.com", html)

        assert len(page.forms) == 2
        login, search = page.forms
        assert login.id == 0
        assert login.method == "POST"
        assert login.action == "/login"
        assert login.html == '<form method="post" action="/login"><input name="user"><button>Go</button></form>'
        assert search.html == '<form action="/search"><input type="search" name="q"></form>'
        assert search.method == "GET"
        assert search.id == 1

    def test_caps(self):
        """Test that every collection and text field is capped."""
        images = "".join(f'<img src="/img{i}.png">' for i in range(80))
        links = "".join(f'<a href="/page{i}">Page {i}</a>' for i in range(150))
        words = "word " * 3000
        html = f"<html><head><title>{'T' * 400}</title></head><body>{images}{links}<p>{words}</p></body></html>"

        page = self.extractor.parse("https://example.com", html)

        assert len(page.title) == TITLE_LIMIT
        assert len(page.images) == MAX_IMAGES
        assert len(page.links) == MAX_LINKS
        assert len(page.content_text) == CONTENT_TEXT_LIMIT
        assert len(page.html_content) == HTML_CONTENT_LIMIT

    def test_never_raises(self, monkeypatch):
        """Test that a parser failure degrades instead of raising."""

        def broken(self, url, html):
            raise ParseError("boom")

        monkeypatch.setattr(MarkupExtractor, "_soup", broken)

        page = self.extractor.parse("https://example.com", "<html><body>Hello</body></html>")

        assert page.title == "Website at https://example.com"
        assert page.content_text == "Unable to parse page content"
        assert page.html_content == "<html><body>Hello</body></html>"

    def test_malformed_markup(self):
        """Test that unbalanced markup still produces a record."""
        page = self.extractor.parse("https://example.com", "<html><body><div><p>Unclosed <b>bold <form method=POST>")

        assert "Unclosed" in page.content_text
        assert len(page.forms) == 1
        assert page.forms[0].method == "POST"
        assert page.forms[0].html == "<form method=POST>"

    def test_long_form_markup_capped(self):
        """Test that form markup is the source text cut at the form cap."""
        fields = "".join(f'<input name="field{i}">' for i in range(100))
        html = f"<html><body>\n  <form method='post'>{fields}</form>\n</body></html>"

        page = self.extractor.parse("https://example.com", html)

        assert len(page.forms[0].html) == FORM_HTML_LIMIT
        assert page.forms[0].html.startswith("<form method='post'><input name=\"field0\">")

    def test_body_retry_after_unclosed_script(self):
        """Test that body text is recovered when an unclosed head script swallows the page."""
        words = " ".join(f"word{i}" for i in range(40))
        html = f"<html><head><script>var tracking = 1;</head><body><p>{words}</p></body></html>"

        page = self.extractor.parse("https://example.com", html)

        assert page.content_text == words
