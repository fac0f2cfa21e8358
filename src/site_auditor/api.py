"""HTTP trigger for running an analysis on a stored project."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .errors import PipelineFatalError, UnsupportedTargetError
from .pipeline import AnalysisPipeline
from .storage import MemoryStorage, StorageBackend

logger = structlog.get_logger()


class AnalyzeRequest(BaseModel):
    project_id: str | None = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(storage: StorageBackend | None = None, pipeline: AnalysisPipeline | None = None) -> FastAPI:
    """
    Build the trigger API.

    Args:
        storage: Backend holding the projects. Defaults to an in-memory store.
        pipeline: Pipeline to run. Defaults to one bound to `storage`.
    """
    storage = storage or MemoryStorage()
    app = FastAPI(
        title="Site Auditor API",
        description="Crawl a website and score its quality and market positioning",
        version=__version__,
    )
    app.state.storage = storage
    app.state.pipeline = pipeline or AnalysisPipeline(storage)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected analyze request", errors=len(exc.errors()))
        return _error(400, "Invalid request body")

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.post("/api/analyze")
    async def analyze(body: AnalyzeRequest, request: Request) -> Any:
        """Run the full analysis for a project and return its summary."""
        if not body.project_id:
            return _error(400, "Project ID is required")

        project = await request.app.state.storage.get_project(body.project_id)
        if project is None:
            logger.warning("Project not found", project_id=body.project_id)
            return _error(404, "Project not found")

        logger.info("Analyze requested", project_id=project.id, name=project.name, url=project.url)
        try:
            summary = await request.app.state.pipeline.run(project.id)
        except (PipelineFatalError, UnsupportedTargetError) as e:
            logger.error("Analysis failed", project_id=project.id, error=str(e))
            return _error(500, "Analysis failed")

        return {"success": True, "message": "Analysis completed", "summary": summary.to_dict()}

    return app
