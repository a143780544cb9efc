"""Exceptions raised by the populate engine and the job manager."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class PopulateError(Exception):
    """Base class for population failures."""


class DataSourceError(PopulateError):
    """The external data source did not produce a response."""


class DataSourceTimeout(DataSourceError):
    pass


class DataSourceTransportError(DataSourceError):
    pass


class EmptyListingError(PopulateError):
    """The data source answered but no usable child names could be extracted."""


class RootResolutionError(PopulateError):
    """The root region could not be found, created or expanded."""


# ---------------------------------------------------------------------------
# Job control
# ---------------------------------------------------------------------------

class JobNotFound(LookupError):
    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class JobConflictError(Exception):
    def __init__(self, message: str, job_id: str, status: str, completed_at: Optional[datetime] = None):
        super().__init__(message)
        self.job_id = job_id
        self.status = status
        self.completed_at = completed_at


class JobAlreadyActive(JobConflictError):
    pass


class JobAlreadyCompleted(JobConflictError):
    pass


class NodeNotFound(LookupError):
    pass
