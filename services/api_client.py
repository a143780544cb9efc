"""
API Client -- thin HTTP client for the locations backend.

Used by the CLI in ``--remote`` mode to start a population job on a running
server and follow it until it finishes.

Configuration:
    BACKEND_URL env var or fallback to http://localhost:8000
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

import httpx

import config_env

logger = logging.getLogger(__name__)

TIMEOUT = 30.0
FINISHED = ("completed", "failed")


class LocationsAPIError(Exception):
    def __init__(self, status_code: int, detail):
        super().__init__(f"HTTP {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class LocationsAPI:
    """Async HTTP client for the locations FastAPI backend."""

    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = (base_url or config_env.BACKEND_URL).rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=TIMEOUT,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    @staticmethod
    def _raise_for_status(resp: httpx.Response):
        if resp.is_success:
            return
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        raise LocationsAPIError(resp.status_code, detail)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self) -> dict:
        """Check if the backend is alive."""
        client = await self._get_client()
        try:
            resp = await client.get("/health")
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            logger.warning("Backend health check failed: %s", e)
            return {"status": "unavailable", "error": str(e)}

    # ------------------------------------------------------------------
    # Population jobs
    # ------------------------------------------------------------------

    async def start_population(self, root_name: str, languages: Sequence[str] | None = None) -> dict:
        """
        POST /locations/populate.

        Raises LocationsAPIError on 400/409; a 409 detail carries
        ``existing_job_id`` and ``status``.
        """
        client = await self._get_client()
        payload = {"root_name": root_name, "languages": list(languages or [])}
        resp = await client.post("/locations/populate", json=payload)
        self._raise_for_status(resp)
        return resp.json()

    async def get_job(self, job_id: str) -> dict:
        client = await self._get_client()
        resp = await client.get(f"/locations/populate/jobs/{job_id}")
        self._raise_for_status(resp)
        return resp.json()

    async def list_jobs(self) -> dict:
        client = await self._get_client()
        resp = await client.get("/locations/populate/jobs")
        self._raise_for_status(resp)
        return resp.json()

    async def get_coverage(self, root_name: str) -> Optional[dict]:
        client = await self._get_client()
        resp = await client.get(f"/locations/status/{root_name}")
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp)
        return resp.json()

    async def wait_for_job(self, job_id: str, poll_interval: float = 5.0, on_update=None) -> dict:
        """Poll until the job is completed or failed; return the last status."""
        while True:
            job = await self.get_job(job_id)
            if on_update is not None:
                on_update(job)
            if job.get("status") in FINISHED:
                return job
            await asyncio.sleep(poll_interval)
