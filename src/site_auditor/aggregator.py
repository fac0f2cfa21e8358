"""Rolls per-page outcomes up into a project summary."""

from collections import defaultdict
from typing import Sequence

from .models import AnalysisSummary, MarketInsight, PageRecord, TestOutcome, TestStatus


class ReportAggregator:
    """Averages scores per test type and counts issues and verdicts."""

    def summarize(
        self,
        project_id: str,
        outcomes: Sequence[TestOutcome],
        insights: Sequence[MarketInsight],
        pages: Sequence[PageRecord],
    ) -> AnalysisSummary:
        scores: dict[str, list[int]] = defaultdict(list)
        for outcome in outcomes:
            scores[outcome.type.value].append(outcome.score)

        category_scores = {
            test_type: round(sum(values) / len(values)) for test_type, values in scores.items()
        }
        overall = round(sum(o.score for o in outcomes) / len(outcomes)) if outcomes else 0
        statuses = [outcome.status for outcome in outcomes]

        return AnalysisSummary(
            project_id=project_id,
            pages_analyzed=len(pages),
            overall_score=overall,
            category_scores=category_scores,
            total_issues=sum(len(outcome.issues) for outcome in outcomes),
            high_severity_issues=sum(
                1 for outcome in outcomes for issue in outcome.issues if issue.severity == "high"
            ),
            passed=statuses.count(TestStatus.PASSED),
            warnings=statuses.count(TestStatus.WARNING),
            failed=statuses.count(TestStatus.FAILED),
            market_dimensions=[
                insight.analysis_type.value for insight in insights if not insight.is_empty
            ],
            degraded=any(page.is_fallback for page in pages),
        )
