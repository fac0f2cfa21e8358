"""JSON file storage backend, one directory per project."""

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Any

import aiofiles
import structlog

from ..config import settings
from ..models import MarketInsight, PageRecord, Project, ProjectStatus, TestOutcome
from .base import (
    MARKET_INSIGHTS,
    PAGES,
    TEST_RESULTS,
    StorageBackend,
    insight_row,
    is_project_id,
    new_project_id,
    outcome_row,
    page_row,
)

logger = structlog.get_logger()

PROJECT_FILE = "project.json"


class JsonStorage(StorageBackend):
    """
    Stores each project under `<data_dir>/<project_id>/`.

    Layout:
        project.json          the project and its status
        pages.json            crawled page records
        test_results.json     analyzer outcomes
        market_insights.json  non-empty market insights
    """

    def __init__(self, data_dir: Path | None = None):
        self.data_dir = Path(data_dir or settings.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    def get_project_dir(self, project_id: str) -> Path:
        if not is_project_id(project_id):
            raise KeyError(project_id)
        return self.data_dir / project_id

    async def _read_json(self, filepath: Path, default: Any) -> Any:
        if not filepath.exists():
            return default
        async with aiofiles.open(filepath, "r", encoding="utf-8") as f:
            return json.loads(await f.read())

    async def _write_json(self, filepath: Path, data: Any) -> None:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(filepath, "w", encoding="utf-8") as f:
            await f.write(json.dumps(data, indent=2, default=str))

    async def _append_row(self, project_id: str, kind: str, row: dict[str, Any]) -> None:
        filepath = self.get_project_dir(project_id) / f"{kind}.json"
        async with self._lock:
            rows = await self._read_json(filepath, [])
            rows.append(row)
            await self._write_json(filepath, rows)

    async def create_project(self, name: str, url: str, description: str | None = None) -> Project:
        project = Project(id=new_project_id(), name=name, url=url, description=description)
        await self._write_json(self.get_project_dir(project.id) / PROJECT_FILE, project.to_dict())
        logger.info("Created project", project_id=project.id, url=url)
        return project

    async def get_project(self, project_id: str) -> Project | None:
        if not is_project_id(project_id):
            return None
        data = await self._read_json(self.get_project_dir(project_id) / PROJECT_FILE, None)
        return Project.from_dict(data) if data else None

    async def set_project_status(self, project_id: str, status: ProjectStatus) -> None:
        project = await self.get_project(project_id)
        if project is None:
            raise KeyError(project_id)
        project.status = status
        project.updated_at = datetime.now()
        await self._write_json(self.get_project_dir(project_id) / PROJECT_FILE, project.to_dict())

    async def create_page_record(self, project_id: str, page: PageRecord) -> None:
        await self._append_row(project_id, PAGES, page_row(project_id, page))

    async def create_test_outcome(self, project_id: str, page_url: str, outcome: TestOutcome) -> None:
        await self._append_row(project_id, TEST_RESULTS, outcome_row(project_id, page_url, outcome))

    async def create_market_insight(self, project_id: str, insight: MarketInsight) -> None:
        await self._append_row(project_id, MARKET_INSIGHTS, insight_row(project_id, insight))

    async def query(self, project_id: str, kind: str) -> list[dict[str, Any]]:
        self._check_kind(kind)
        return await self._read_json(self.get_project_dir(project_id) / f"{kind}.json", [])
