"""Pydantic schemas for FastAPI request / response models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from domain.job import Job


# ---------------------------------------------------------------------------
# Population jobs
# ---------------------------------------------------------------------------

class PopulateRequest(BaseModel):
    root_name: str = Field(..., description="Region to populate, e.g. Telangana")
    languages: list[str] = Field(default_factory=list, description="Language codes; empty = configured defaults")


class PopulateAccepted(BaseModel):
    job_id: str
    root_name: str
    status: str
    target_languages: list[str]
    status_url: str
    message: str = ""


class JobProgressSchema(BaseModel):
    current_step: str = ""
    level1_processed: int = 0
    level1_total: int = 0
    level2_processed: int = 0
    level3_processed: int = 0
    languages_completed: list[str] = []
    external_calls: int = 0


class BranchFailureSchema(BaseModel):
    level: str
    name: str
    reason: str


class JobStatusResponse(BaseModel):
    job_id: str
    root_name: str
    status: str
    target_languages: list[str]
    progress: JobProgressSchema
    failures: list[BranchFailureSchema] = []
    error: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    @classmethod
    def from_job(cls, job: Job) -> "JobStatusResponse":
        end = job.completed_at or datetime.now()
        return cls(
            job_id=job.id,
            root_name=job.root_name,
            status=job.status.value,
            target_languages=list(job.target_languages),
            progress=JobProgressSchema(**job.progress_dict()),
            failures=[BranchFailureSchema(**f) for f in job.failures_list()],
            error=job.error,
            started_at=job.started_at,
            completed_at=job.completed_at,
            duration_seconds=round((end - job.started_at).total_seconds(), 1),
        )


class JobListResponse(BaseModel):
    count: int
    jobs: list[JobStatusResponse]


# ---------------------------------------------------------------------------
# Coverage / retry
# ---------------------------------------------------------------------------

class CoverageGap(BaseModel):
    id: int
    name: str
    parent_name: str


class CoverageResponse(BaseModel):
    region_id: int
    region_name: str
    region_languages: list[str]
    totals: dict[str, int]
    sub_regions_without_local_areas: list[CoverageGap] = []
    local_areas_without_settlements: list[CoverageGap] = []


class RetryRequest(BaseModel):
    languages: list[str] = []
    recursive: bool = False


class NodeBrief(BaseModel):
    id: int
    name: str


class RetryResponse(BaseModel):
    level: str
    node_id: int
    node_name: str
    child_level: str
    children: list[NodeBrief]
    created: int
    translations_created: int
    external_calls: int
    failures: list[BranchFailureSchema] = []
