"""Accessibility analyzer."""

import re

from ..models import FormRecord, PageRecord, Recommendation, TestOutcome, TestType
from .base import (
    BaseAnalyzer,
    Check,
    Finding,
    finding,
    form_label,
    h1_count,
    heading_levels,
    images_missing_alt,
)

_INPUT_TAG = re.compile(r"<input\b[^>]*>", re.IGNORECASE)
_INPUT_ID = re.compile(r"""\bid=["']([^"']+)["']""", re.IGNORECASE)
_INPUT_TYPE = re.compile(r"""\btype=["']?([a-z]+)""", re.IGNORECASE)
_LOW_CONTRAST = re.compile(r"color:\s*#(?:ccc|ddd|eee)\b", re.IGNORECASE)

# Inputs that are never rendered as fields needing a label.
UNLABELLED_INPUT_TYPES = {"hidden", "submit", "button", "reset", "image"}

LIMITED_SCORE = 70
LIMITED_RECOMMENDATIONS = (
    Recommendation(
        priority="medium",
        message="Run a full accessibility audit when the website becomes accessible",
        impact="Markup-level checks require full page access",
    ),
    Recommendation(
        priority="high",
        message="Provide descriptive alt text for all meaningful images",
        impact="Improves screen reader accessibility and SEO",
    ),
    Recommendation(
        priority="medium",
        message="Verify color contrast meets WCAG AA standards (4.5:1 ratio)",
        impact="Ensures text is readable for users with visual impairments",
    ),
)


def unlabelled_inputs(form: FormRecord) -> list[str]:
    """Inputs with neither an aria-label nor a <label for=...> in the same form."""
    missing = []
    for tag in _INPUT_TAG.findall(form.html):
        input_type = _INPUT_TYPE.search(tag)
        if input_type and input_type.group(1).lower() in UNLABELLED_INPUT_TYPES:
            continue
        if "aria-label" in tag.lower():
            continue
        input_id = _INPUT_ID.search(tag)
        if input_id and (
            f'for="{input_id.group(1)}"' in form.html or f"for='{input_id.group(1)}'" in form.html
        ):
            continue
        missing.append(tag)
    return missing


def _missing_alt_text(page: PageRecord) -> list[Finding]:
    count = images_missing_alt(page)
    if not count:
        return []
    return finding(f"{count} images missing alt text", count=count)


def _missing_h1(page: PageRecord) -> list[Finding]:
    if h1_count(page):
        return []
    return finding("Page is missing an H1 heading", location=page.url)


def _heading_hierarchy(page: PageRecord) -> list[Finding]:
    jumps = 0
    previous = 0
    for level in heading_levels(page):
        if level > previous + 1:
            jumps += 1
        previous = level
    if not jumps:
        return []
    return finding("Heading hierarchy is not properly structured", jumps=jumps)


def _form_labels(page: PageRecord) -> list[Finding]:
    found = []
    for index, form in enumerate(page.forms):
        missing = unlabelled_inputs(form)
        if missing:
            found.append(
                {
                    "message": f"{form_label(index)} has {len(missing)} inputs without labels",
                    "form": form.action or "Unknown action",
                }
            )
    return found


def _contrast(page: PageRecord) -> list[Finding]:
    if not _LOW_CONTRAST.search(page.html_content):
        return []
    return finding("Potential low color contrast detected", location=page.url)


class AccessibilityAnalyzer(BaseAnalyzer):
    """Checks alt text, heading structure, form labelling and contrast hints."""

    test_type = TestType.ACCESSIBILITY
    checks = (
        Check(
            "missing_alt_text",
            "medium",
            15,
            _missing_alt_text,
            Recommendation(
                priority="medium",
                message="Add descriptive alt text to all images",
                impact="Improves screen reader accessibility and SEO",
            ),
        ),
        Check(
            "missing_h1",
            "high",
            20,
            _missing_h1,
            Recommendation(
                priority="high",
                message="Add a descriptive H1 heading to the page",
                impact="Improves page structure and screen reader navigation",
            ),
        ),
        Check(
            "heading_hierarchy",
            "medium",
            10,
            _heading_hierarchy,
            Recommendation(
                priority="medium",
                message="Ensure headings follow proper hierarchical order (H1 → H2 → H3, etc.)",
                impact="Improves content structure and navigation for assistive technologies",
            ),
        ),
        Check(
            "missing_form_labels",
            "high",
            15,
            _form_labels,
            Recommendation(
                priority="high",
                message="Associate all form inputs with descriptive labels",
                impact="Essential for screen reader users to understand form fields",
            ),
        ),
        Check(
            "potential_contrast_issues",
            "medium",
            10,
            _contrast,
            Recommendation(
                priority="medium",
                message="Verify color contrast meets WCAG AA standards (4.5:1 ratio)",
                impact="Ensures text is readable for users with visual impairments",
            ),
        ),
    )

    def degraded(self, page: PageRecord) -> TestOutcome:
        return self._outcome(LIMITED_SCORE, [], list(LIMITED_RECOMMENDATIONS))
