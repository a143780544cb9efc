"""Location population endpoints -- start/poll jobs, coverage, targeted retry."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from backend.populate.coverage import hierarchy_coverage
from backend.populate.errors import (
    DataSourceError,
    EmptyListingError,
    JobConflictError,
    JobNotFound,
    NodeNotFound,
)
from backend.populate.jobs import JobManager
from backend.populate.populator import HierarchyPopulator
from backend.schemas import (
    CoverageGap,
    CoverageResponse,
    JobListResponse,
    JobStatusResponse,
    NodeBrief,
    PopulateAccepted,
    PopulateRequest,
    RetryRequest,
    RetryResponse,
)
from domain.location import Level

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])


def get_job_manager(request: Request) -> JobManager:
    return request.app.state.job_manager


def get_populator(request: Request) -> HierarchyPopulator:
    return request.app.state.job_manager.populator


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

@router.post("/populate", response_model=PopulateAccepted, status_code=202)
async def start_population(body: PopulateRequest, manager: JobManager = Depends(get_job_manager)):
    try:
        job = await manager.start_job(body.root_name, body.languages)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except JobConflictError as e:
        detail = {"error": str(e), "existing_job_id": e.job_id, "status": e.status}
        if e.completed_at is not None:
            detail["completed_at"] = e.completed_at.isoformat()
        raise HTTPException(status_code=409, detail=detail)

    return PopulateAccepted(
        job_id=job.id,
        root_name=job.root_name,
        status=job.status.value,
        target_languages=list(job.target_languages),
        status_url=f"/locations/populate/jobs/{job.id}",
        message=f"Population started for {job.root_name}",
    )


@router.get("/populate/jobs/{job_id}", response_model=JobStatusResponse)
async def job_status(job_id: str, manager: JobManager = Depends(get_job_manager)):
    try:
        job = await manager.get_status(job_id)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobStatusResponse.from_job(job)


@router.get("/populate/jobs", response_model=JobListResponse)
async def list_jobs(manager: JobManager = Depends(get_job_manager)):
    jobs = await manager.list_jobs()
    return JobListResponse(count=len(jobs), jobs=[JobStatusResponse.from_job(j) for j in jobs])


# ---------------------------------------------------------------------------
# Coverage / retry
# ---------------------------------------------------------------------------

@router.get("/status/{root_name}", response_model=CoverageResponse)
async def coverage(root_name: str, populator: HierarchyPopulator = Depends(get_populator)):
    report = await hierarchy_coverage(populator.repository, root_name)
    if report is None:
        raise HTTPException(status_code=404, detail="Region not found")
    return CoverageResponse(
        region_id=report.region.id,
        region_name=report.region.name,
        region_languages=report.region_languages,
        totals=report.totals,
        sub_regions_without_local_areas=[CoverageGap(**g) for g in report.sub_regions_without_local_areas],
        local_areas_without_settlements=[CoverageGap(**g) for g in report.local_areas_without_settlements],
    )


@router.post("/retry/{level}/{node_id}", response_model=RetryResponse)
async def retry_children(
    level: str,
    node_id: int,
    body: Optional[RetryRequest] = None,
    populator: HierarchyPopulator = Depends(get_populator),
):
    """Fetch the children of one stored node again (e.g. a district with no mandals)."""
    body = body or RetryRequest()
    try:
        parsed = Level.parse(level)
        result = await populator.repopulate_children(parsed, node_id, body.languages, recursive=body.recursive)
    except NodeNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (DataSourceError, EmptyListingError) as e:
        logger.warning("Retry for %s %s failed: %s", level, node_id, e)
        raise HTTPException(status_code=502, detail=f"Data source failed: {e}")

    child_level = parsed.child
    return RetryResponse(
        level=parsed.value,
        node_id=result.node.id,
        node_name=result.node.name,
        child_level=child_level.value,
        children=[NodeBrief(id=c.id, name=c.name) for c in result.children],
        created=sum(result.stats.created.values()),
        translations_created=result.stats.translations_created,
        external_calls=result.stats.external_calls,
        failures=[{"level": f.level, "name": f.name, "reason": f.reason} for f in result.stats.failures],
    )
