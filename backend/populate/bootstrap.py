"""Default wiring of the engine for the API server and the CLI."""

from __future__ import annotations

import logging
from typing import Optional

import config_env
from data.memory_job_store_impl import MemoryJobStoreImpl
from data.sql_job_store_impl import SqlJobStoreImpl
from data.sql_location_repository_impl import SqlLocationRepositoryImpl
from domain.job_store import JobStore
from domain.location_repository import LocationRepository

from .client import DataSourceClient
from .jobs import JobManager
from .populator import HierarchyPopulator
from .settings import PopulateSettings

logger = logging.getLogger(__name__)


def build_job_store(kind: Optional[str] = None) -> JobStore:
    kind = (kind or config_env.JOB_STORE).lower()
    if kind == "database":
        return SqlJobStoreImpl()
    if kind != "memory":
        logger.warning("Unknown JOB_STORE %r, using in-memory job store", kind)
    return MemoryJobStoreImpl()


def build_populator(
    repository: Optional[LocationRepository] = None,
    settings: Optional[PopulateSettings] = None,
) -> HierarchyPopulator:
    settings = settings or PopulateSettings()
    client = DataSourceClient(timeout=settings.timeout_seconds, country=settings.country)
    if not client.is_configured:
        logger.warning("LLM_API_KEY is not set -- population jobs will fail at the first request")
    return HierarchyPopulator(repository or SqlLocationRepositoryImpl(), client, settings)


def build_job_manager(
    populator: Optional[HierarchyPopulator] = None,
    store: Optional[JobStore] = None,
) -> JobManager:
    populator = populator or build_populator()
    return JobManager(store or build_job_store(), populator)
