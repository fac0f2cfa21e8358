"""Abstract storage collaborator used by the analysis pipeline."""

import re
import uuid
from abc import ABC, abstractmethod
from typing import Any

from ..models import MarketInsight, PageRecord, Project, ProjectStatus, TestOutcome

# Row kinds accepted by `StorageBackend.query`.
PAGES = "pages"
TEST_RESULTS = "test_results"
MARKET_INSIGHTS = "market_insights"
ROW_KINDS = (PAGES, TEST_RESULTS, MARKET_INSIGHTS)

_PROJECT_ID = re.compile(r"[0-9a-f]{32}")


def new_project_id() -> str:
    return uuid.uuid4().hex


def is_project_id(value: str) -> bool:
    """Check that `value` has the shape of an id from `new_project_id`."""
    return _PROJECT_ID.fullmatch(value) is not None


def page_row(project_id: str, page: PageRecord) -> dict[str, Any]:
    return {"project_id": project_id, **page.to_dict()}


def outcome_row(project_id: str, page_url: str, outcome: TestOutcome) -> dict[str, Any]:
    return {"project_id": project_id, "page_url": page_url, **outcome.to_dict()}


def insight_row(project_id: str, insight: MarketInsight) -> dict[str, Any]:
    if insight.is_empty:
        raise ValueError(f"Refusing to store empty {insight.analysis_type.value} insight")
    return {"project_id": project_id, **insight.to_dict()}


class StorageBackend(ABC):
    """Persists projects and the rows an analysis run produces."""

    @abstractmethod
    async def create_project(self, name: str, url: str, description: str | None = None) -> Project:
        """Register a new project in the pending state."""

    @abstractmethod
    async def get_project(self, project_id: str) -> Project | None:
        """Look up a project, returning None when it does not exist."""

    @abstractmethod
    async def set_project_status(self, project_id: str, status: ProjectStatus) -> None:
        """Move a project to a new lifecycle state."""

    @abstractmethod
    async def create_page_record(self, project_id: str, page: PageRecord) -> None:
        """Store one crawled page."""

    @abstractmethod
    async def create_test_outcome(self, project_id: str, page_url: str, outcome: TestOutcome) -> None:
        """Store one analyzer outcome for one page."""

    @abstractmethod
    async def create_market_insight(self, project_id: str, insight: MarketInsight) -> None:
        """
        Store one market insight.

        Raises:
            ValueError: The insight carries no data.
        """

    @abstractmethod
    async def query(self, project_id: str, kind: str) -> list[dict[str, Any]]:
        """Read back stored rows of one kind for a project."""

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in ROW_KINDS:
            raise ValueError(f"Unknown row kind: {kind}")
