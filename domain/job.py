"""Population job record -- status, progress counters and node-level failures."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (JobStatus.QUEUED, JobStatus.PROCESSING)


@dataclass
class JobProgress:
    current_step: str = ""
    level1_processed: int = 0
    level1_total: int = 0
    level2_processed: int = 0
    level3_processed: int = 0
    languages_completed: list[str] = field(default_factory=list)
    external_calls: int = 0


@dataclass
class BranchFailure:
    """A skipped branch: which node, at which level, and a short reason."""

    level: str
    name: str
    reason: str


@dataclass
class Job:
    id: str
    root_name: str
    target_languages: list[str]
    status: JobStatus = JobStatus.QUEUED
    progress: JobProgress = field(default_factory=JobProgress)
    error: Optional[str] = None
    failures: list[BranchFailure] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def root_key(self) -> str:
        return self.root_name.strip().casefold()

    def progress_dict(self) -> dict:
        return asdict(self.progress)

    def failures_list(self) -> list[dict]:
        return [asdict(f) for f in self.failures]
