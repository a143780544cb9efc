"""
FastAPI application -- location reference data API server.

Run locally:
    uvicorn backend.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from backend.database import init_db
from backend.populate.jobs import JobManager
from backend.routes import locations

logger = logging.getLogger(__name__)


def create_app(job_manager: Optional[JobManager] = None) -> FastAPI:
    """
    Build the API. Tests pass a ready JobManager (in-memory stores, fake
    data source); otherwise the lifespan creates the tables and wires the
    SQL repository, the configured job store and the LLM client.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "job_manager", None) is None:
            from backend.populate.bootstrap import build_job_manager

            await init_db()
            app.state.job_manager = build_job_manager()
            logger.info("Location API ready (job store: %s)", type(app.state.job_manager.store).__name__)

        yield

        manager = app.state.job_manager
        if manager.running:
            logger.warning("Shutting down with %d population job(s) still running", manager.running)

    app = FastAPI(
        title="Locations API",
        version="1.0.0",
        description="Hierarchical location reference data populated by an LLM, with localized names",
        lifespan=lifespan,
    )
    app.include_router(locations.router)
    if job_manager is not None:
        app.state.job_manager = job_manager

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        manager: JobManager = app.state.job_manager
        return {
            "status": "ok",
            "llm_configured": manager.populator.client.is_configured,
            "running_jobs": manager.running,
        }

    return app


app = create_app()
