from typing import Optional

from domain.job import Job
from domain.job_store import JobStore


class MemoryJobStoreImpl(JobStore):
    """Job history for the process lifetime only."""

    def __init__(self):
        super().__init__()
        self.jobs = dict[str, Job]()

    async def save(self, job: Job) -> None:
        self.jobs[job.id] = job

    async def get(self, job_id: str) -> Optional[Job]:
        return self.jobs.get(job_id)

    async def find_latest_by_root(self, root_name: str) -> Optional[Job]:
        key = root_name.strip().casefold()
        matches = [j for j in self.jobs.values() if j.root_key == key]
        if not matches:
            return None
        return max(matches, key=lambda j: j.started_at)

    async def list_jobs(self) -> list[Job]:
        return list(self.jobs.values())
