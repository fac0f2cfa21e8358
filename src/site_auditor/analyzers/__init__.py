"""Analyzers module for scoring crawled pages and the crawled corpus."""

from .accessibility import AccessibilityAnalyzer
from .base import BaseAnalyzer, Check
from .market import MarketInsightExtractor
from .performance import PerformanceAnalyzer
from .security import SecurityAnalyzer
from .seo import SEOAnalyzer
from .ui_ux import UIUXAnalyzer


def default_analyzers() -> list[BaseAnalyzer]:
    """One instance of every page analyzer, in reporting order."""
    return [
        SecurityAnalyzer(),
        PerformanceAnalyzer(),
        SEOAnalyzer(),
        AccessibilityAnalyzer(),
        UIUXAnalyzer(),
    ]


__all__ = [
    "BaseAnalyzer",
    "Check",
    "SecurityAnalyzer",
    "PerformanceAnalyzer",
    "SEOAnalyzer",
    "AccessibilityAnalyzer",
    "UIUXAnalyzer",
    "MarketInsightExtractor",
    "default_analyzers",
]
