"""Data models for the site auditor."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# Marks the synthetic record substituted when no page could be crawled.
FALLBACK_META_DESCRIPTION = "Unable to crawl - performing limited analysis"
SPA_META_DESCRIPTION = "Single Page Application or API endpoint"

TITLE_LIMIT = 200
META_DESCRIPTION_LIMIT = 300
CONTENT_TEXT_LIMIT = 5000
HTML_CONTENT_LIMIT = 15000
FORM_HTML_LIMIT = 1000
MAX_IMAGES = 50
MAX_LINKS = 100
MAX_SCRIPTS = 20
MAX_STYLESHEETS = 20


class ProjectStatus(Enum):
    """Lifecycle of an analysis project."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class TestType(Enum):
    """Kinds of heuristic quality checks."""

    __test__ = False

    SECURITY = "security"
    PERFORMANCE = "performance"
    SEO = "seo"
    ACCESSIBILITY = "accessibility"
    UI_UX = "ui_ux"


class TestStatus(Enum):
    """Verdict derived from an analyzer score."""

    __test__ = False

    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"

    @classmethod
    def from_score(cls, score: int) -> "TestStatus":
        if score >= 80:
            return cls.PASSED
        if score >= 60:
            return cls.WARNING
        return cls.FAILED


class AnalysisType(Enum):
    """Dimensions of the corpus-wide market analysis."""

    COMPETITOR = "competitor"
    TARGET_AUDIENCE = "target_audience"
    MARKET_SIZE = "market_size"
    PRICING = "pricing"
    FEATURES = "features"


@dataclass(frozen=True)
class FormRecord:
    """A form found on a page, with its (truncated) raw markup."""

    id: int
    html: str
    method: str = "GET"
    action: str = ""


@dataclass(frozen=True)
class PageRecord:
    """Structured result of fetching and parsing one URL."""

    url: str
    title: str = ""
    meta_description: str = ""
    content_text: str = ""
    html_content: str = ""
    images: tuple[str, ...] = ()
    links: tuple[str, ...] = ()
    forms: tuple[FormRecord, ...] = ()
    scripts: tuple[str, ...] = ()
    stylesheets: tuple[str, ...] = ()
    page_size: int = 0

    @property
    def is_fallback(self) -> bool:
        return self.meta_description == FALLBACK_META_DESCRIPTION

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("images", "links", "scripts", "stylesheets", "forms"):
            data[key] = list(data[key])
        return data


@dataclass(frozen=True)
class Issue:
    """A single finding reported by an analyzer."""

    severity: str  # high, medium, low
    type: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"severity": self.severity, "type": self.type, "message": self.message, **self.details}


@dataclass(frozen=True)
class Recommendation:
    """Suggested fix paired with an issue."""

    priority: str
    message: str
    impact: str

    def to_dict(self) -> dict[str, Any]:
        return {"priority": self.priority, "message": self.message, "impact": self.impact}


@dataclass(frozen=True)
class TestOutcome:
    """One analyzer's scored verdict for one page."""

    __test__ = False

    type: TestType
    score: int
    issues: tuple[Issue, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()

    @property
    def status(self) -> TestStatus:
        return TestStatus.from_score(self.score)

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_type": self.type.value,
            "status": self.status.value,
            "score": self.score,
            "issues": [issue.to_dict() for issue in self.issues],
            "recommendations": [rec.to_dict() for rec in self.recommendations],
        }


@dataclass(frozen=True)
class MarketInsight:
    """One corpus-wide business positioning signal."""

    analysis_type: AnalysisType
    insights: dict[str, Any] = field(default_factory=dict)
    confidence_score: float = 0.1

    @property
    def is_empty(self) -> bool:
        return not self.insights

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysis_type": self.analysis_type.value,
            "insights": self.insights,
            "confidence_score": self.confidence_score,
        }


@dataclass
class Project:
    """A website registered for analysis."""

    id: str
    name: str
    url: str
    description: str | None = None
    status: ProjectStatus = ProjectStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        return cls(
            id=data["id"],
            name=data["name"],
            url=data["url"],
            description=data.get("description"),
            status=ProjectStatus(data.get("status", "pending")),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


@dataclass
class AnalysisSummary:
    """Externally visible score and issue summary for one analysis run."""

    project_id: str
    pages_analyzed: int = 0
    overall_score: int = 0
    category_scores: dict[str, int] = field(default_factory=dict)
    total_issues: int = 0
    high_severity_issues: int = 0
    passed: int = 0
    warnings: int = 0
    failed: int = 0
    market_dimensions: list[str] = field(default_factory=list)
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
