"""Job store persisted in the ``populate_jobs`` table so history survives restarts."""

from __future__ import annotations

import json
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from backend.models import PopulateJobRecord
from domain.job import BranchFailure, Job, JobProgress, JobStatus
from domain.job_store import JobStore

logger = logging.getLogger(__name__)


def _to_job(record: PopulateJobRecord) -> Job:
    progress = json.loads(record.progress_json or "{}")
    failures = json.loads(record.failures_json or "[]")
    return Job(
        id=record.id,
        root_name=record.root_name,
        target_languages=json.loads(record.target_languages or "[]"),
        status=JobStatus(record.status),
        progress=JobProgress(**progress),
        error=record.error,
        failures=[BranchFailure(**f) for f in failures],
        started_at=record.started_at,
        completed_at=record.completed_at,
    )


class SqlJobStoreImpl(JobStore):
    def __init__(self, session_factory: async_sessionmaker | None = None):
        super().__init__()
        if session_factory is None:
            from backend.database import async_session

            session_factory = async_session
        self._session_factory = session_factory

    async def save(self, job: Job) -> None:
        async with self._session_factory() as session:
            record = await session.get(PopulateJobRecord, job.id)
            if record is None:
                record = PopulateJobRecord(id=job.id)
                session.add(record)
            record.root_name = job.root_name
            record.root_key = job.root_key
            record.target_languages = json.dumps(job.target_languages)
            record.status = job.status.value
            record.progress_json = json.dumps(job.progress_dict(), ensure_ascii=False)
            record.failures_json = json.dumps(job.failures_list(), ensure_ascii=False)
            record.error = job.error
            record.started_at = job.started_at
            record.completed_at = job.completed_at
            await session.commit()

    async def get(self, job_id: str) -> Optional[Job]:
        async with self._session_factory() as session:
            record = await session.get(PopulateJobRecord, job_id)
            return _to_job(record) if record else None

    async def find_latest_by_root(self, root_name: str) -> Optional[Job]:
        async with self._session_factory() as session:
            stmt = (
                select(PopulateJobRecord)
                .where(PopulateJobRecord.root_key == root_name.strip().casefold())
                .order_by(PopulateJobRecord.started_at.desc())
                .limit(1)
            )
            record = (await session.execute(stmt)).scalar_one_or_none()
            return _to_job(record) if record else None

    async def list_jobs(self) -> list[Job]:
        async with self._session_factory() as session:
            stmt = select(PopulateJobRecord).order_by(PopulateJobRecord.started_at)
            records = (await session.execute(stmt)).scalars().all()
            return [_to_job(r) for r in records]
