"""
Population job control.

One background asyncio task per job. ``start_job`` registers the job and
returns immediately; callers poll ``get_status`` or await ``wait``.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime
from typing import Optional, Sequence

from domain.job import Job, JobStatus
from domain.job_store import JobStore

from .errors import JobAlreadyActive, JobAlreadyCompleted, JobNotFound
from .populator import HierarchyPopulator
from .settings import PopulateSettings, normalize_languages

logger = logging.getLogger(__name__)

# Failure messages exposed to pollers are cut to this length
MAX_ERROR_LENGTH = 300


def new_job_id() -> str:
    return f"loc_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _short_error(error: BaseException) -> str:
    message = str(error) or error.__class__.__name__
    return message[:MAX_ERROR_LENGTH]


class JobManager:
    def __init__(
        self,
        store: JobStore,
        populator: HierarchyPopulator,
        settings: Optional[PopulateSettings] = None,
    ):
        self.store = store
        self.populator = populator
        self.settings = settings or populator.settings
        self._lock = asyncio.Lock()
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def running(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    async def start_job(self, root_name: str, languages: Optional[Sequence[str]] = None) -> Job:
        """
        Register a job for ``root_name`` and start it in the background.

        Raises ValueError for an empty root name, JobAlreadyActive when a job
        for the same root (case-insensitive) is queued or running, and
        JobAlreadyCompleted when one already finished. Failed jobs do not block.
        """
        name = " ".join((root_name or "").split())
        if not name:
            raise ValueError("root_name is required")
        langs = normalize_languages(languages, self.settings.languages)
        if not langs:
            raise ValueError("at least one target language is required")

        async with self._lock:
            existing = await self.store.find_latest_by_root(name)
            if existing is not None:
                await self._check_conflict(existing)

            job = Job(id=new_job_id(), root_name=name, target_languages=langs)
            await self.store.save(job)
            task = asyncio.create_task(self._run(job), name=f"populate-{job.id}")
            self._tasks[job.id] = task
            task.add_done_callback(lambda _, job_id=job.id: self._tasks.pop(job_id, None))

        logger.info("Queued population job %s for %s (languages=%s)", job.id, name, ",".join(langs))
        return job

    async def _check_conflict(self, existing: Job):
        if existing.status.is_active:
            task = self._tasks.get(existing.id)
            if task is None or task.done():
                # Left behind by an earlier process (durable store); nothing runs it any more
                logger.warning("Job %s for %s was interrupted, allowing a new run", existing.id, existing.root_name)
                existing.status = JobStatus.FAILED
                existing.error = "interrupted"
                existing.completed_at = datetime.now()
                await self.store.save(existing)
                return
            raise JobAlreadyActive(
                f"Population already in progress for {existing.root_name}",
                job_id=existing.id,
                status=existing.status.value,
            )
        if existing.status is JobStatus.COMPLETED:
            raise JobAlreadyCompleted(
                f"Population already completed for {existing.root_name}",
                job_id=existing.id,
                status=existing.status.value,
                completed_at=existing.completed_at,
            )

    async def get_status(self, job_id: str) -> Job:
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    async def list_jobs(self) -> list[Job]:
        jobs = await self.store.list_jobs()
        return sorted(jobs, key=lambda j: j.started_at, reverse=True)

    async def wait(self, job_id: str) -> Job:
        """Block until the job has finished and return it. Finished jobs come from the store."""
        task = self._tasks.get(job_id)
        if task is None:
            return await self.get_status(job_id)
        return await task

    # ------------------------------------------------------------------
    # Background task
    # ------------------------------------------------------------------

    async def _run(self, job: Job) -> Job:
        job.status = JobStatus.PROCESSING
        job.progress.current_step = f"Starting population for {job.root_name}"

        try:
            await self.store.save(job)
            logger.info("Population job %s started for %s", job.id, job.root_name)
            stats = await self.populator.populate(job, on_progress=self.store.save)
        except Exception as e:
            job.status = JobStatus.FAILED
            job.error = _short_error(e)
            job.progress.current_step = "Failed"
            logger.exception("Population job %s for %s failed", job.id, job.root_name)
        else:
            job.status = JobStatus.COMPLETED
            job.progress.current_step = "Completed"
            logger.info(
                "Population job %s for %s completed: %d external calls, %d branch failures",
                job.id, job.root_name, stats.external_calls, len(stats.failures),
            )
        job.completed_at = datetime.now()
        await self.store.save(job)
        return job
