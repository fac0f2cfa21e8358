"""Base analyzer: an ordered table of scored checks."""

import re
from dataclasses import dataclass
from typing import Any, Callable

from ..models import Issue, PageRecord, Recommendation, TestOutcome, TestType

Finding = dict[str, Any]

_IMG_TAG = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_HEADING_OPEN = re.compile(r"<h([1-6])\b[^>]*>", re.IGNORECASE)


@dataclass(frozen=True)
class Check:
    """
    One entry of an analyzer's scoring table.

    `detect` returns one finding per detected problem: page-level checks
    return at most one, per-form checks return one per offending form. Each
    finding must carry a `message`; any other keys are kept as issue details.
    Every finding costs `penalty` points and appends `recommendation`.
    """

    issue_type: str
    severity: str
    penalty: int
    detect: Callable[[PageRecord], list[Finding]]
    recommendation: Recommendation


def finding(message: str, **details: Any) -> list[Finding]:
    """Single-finding result for page-level checks."""
    return [{"message": message, **details}]


def images_missing_alt(page: PageRecord) -> int:
    """Count <img> tags in the markup that carry no alt attribute."""
    return sum(1 for tag in _IMG_TAG.findall(page.html_content) if not re.search(r"\balt\s*=", tag, re.IGNORECASE))


def heading_levels(page: PageRecord) -> list[int]:
    """Levels of every opening heading tag, in document order."""
    return [int(level) for level in _HEADING_OPEN.findall(page.html_content)]


def h1_count(page: PageRecord) -> int:
    return heading_levels(page).count(1)


def form_label(form_index: int) -> str:
    return f"Form {form_index + 1}"


class BaseAnalyzer:
    """
    Scores one page against a fixed table of checks.

    Subclasses set `test_type` and `checks`, and override `degraded` to
    describe what happens for the synthetic fallback record.
    """

    test_type: TestType
    checks: tuple[Check, ...] = ()

    @property
    def name(self) -> str:
        return self.test_type.value

    def analyze(self, page: PageRecord) -> TestOutcome:
        """Run every check against the page and return the scored outcome."""
        if page.is_fallback:
            return self.degraded(page)
        return self._run(page, self.checks)

    def _run(self, page: PageRecord, checks: tuple[Check, ...]) -> TestOutcome:
        score = 100
        issues: list[Issue] = []
        recommendations: list[Recommendation] = []

        for check in checks:
            for found in check.detect(page):
                details = {key: value for key, value in found.items() if key != "message"}
                issues.append(Issue(check.severity, check.issue_type, found["message"], details))
                recommendations.append(check.recommendation)
                score -= check.penalty

        return self._outcome(score, issues, recommendations)

    def degraded(self, page: PageRecord) -> TestOutcome:
        """Outcome for the fallback record, where no markup is available."""
        raise NotImplementedError

    def _outcome(
        self,
        score: int,
        issues: list[Issue],
        recommendations: list[Recommendation],
    ) -> TestOutcome:
        return TestOutcome(
            type=self.test_type,
            score=max(0, min(100, score)),
            issues=tuple(issues),
            recommendations=tuple(recommendations),
        )
