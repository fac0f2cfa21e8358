"""In-process storage backend."""

from collections import defaultdict
from datetime import datetime
from typing import Any

from ..models import MarketInsight, PageRecord, Project, ProjectStatus, TestOutcome
from .base import (
    MARKET_INSIGHTS,
    PAGES,
    TEST_RESULTS,
    StorageBackend,
    insight_row,
    new_project_id,
    outcome_row,
    page_row,
)


class MemoryStorage(StorageBackend):
    """Keeps everything in dictionaries. Used by tests and the default API app."""

    def __init__(self):
        self.projects: dict[str, Project] = {}
        self.rows: dict[tuple[str, str], list[dict[str, Any]]] = defaultdict(list)

    async def create_project(self, name: str, url: str, description: str | None = None) -> Project:
        project = Project(id=new_project_id(), name=name, url=url, description=description)
        self.projects[project.id] = project
        return project

    async def get_project(self, project_id: str) -> Project | None:
        return self.projects.get(project_id)

    async def set_project_status(self, project_id: str, status: ProjectStatus) -> None:
        project = self.projects.get(project_id)
        if project is None:
            raise KeyError(project_id)
        project.status = status
        project.updated_at = datetime.now()

    async def create_page_record(self, project_id: str, page: PageRecord) -> None:
        self.rows[(project_id, PAGES)].append(page_row(project_id, page))

    async def create_test_outcome(self, project_id: str, page_url: str, outcome: TestOutcome) -> None:
        self.rows[(project_id, TEST_RESULTS)].append(outcome_row(project_id, page_url, outcome))

    async def create_market_insight(self, project_id: str, insight: MarketInsight) -> None:
        self.rows[(project_id, MARKET_INSIGHTS)].append(insight_row(project_id, insight))

    async def query(self, project_id: str, kind: str) -> list[dict[str, Any]]:
        self._check_kind(kind)
        return list(self.rows.get((project_id, kind), []))
