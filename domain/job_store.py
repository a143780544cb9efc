from abc import ABC, abstractmethod
from typing import Optional

from domain.job import Job


class JobStore(ABC):
    """Where population jobs live. Only the JobManager writes to it."""

    @abstractmethod
    async def save(self, job: Job) -> None:
        pass

    @abstractmethod
    async def get(self, job_id: str) -> Optional[Job]:
        pass

    @abstractmethod
    async def find_latest_by_root(self, root_name: str) -> Optional[Job]:
        """Most recently started job for ``root_name`` (case-insensitive)."""

    @abstractmethod
    async def list_jobs(self) -> list[Job]:
        pass
