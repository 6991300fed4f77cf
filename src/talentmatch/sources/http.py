"""HTTP document sources — internal endpoints of the jobs and profiles services."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from talentmatch.exceptions import SourceUnavailableError
from talentmatch.sources.types import CandidateData, JobData

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 10.0


class _HttpSource:
    """Shared ``httpx.AsyncClient`` handling for the service clients.

    Pass *client* to share one connection pool (or to inject an
    ``httpx.MockTransport`` in tests); otherwise a client is created for
    *base_url* and closed by :meth:`close`.
    """

    _service: str = "service"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        if client is None and not base_url:
            msg = f"{type(self).__name__} needs a base_url or a client"
            raise ValueError(msg)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or "", timeout=timeout, headers=headers
        )

    async def _get_json(self, path: str) -> dict[str, Any] | None:
        """GET *path*; ``None`` on 404, :class:`SourceUnavailableError` on any other failure."""
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as e:
            logger.error("Request to %s failed: %s", self._service, e)
            msg = f"{self._service} unreachable: {e}"
            raise SourceUnavailableError(msg) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            msg = f"{self._service} returned {response.status_code} for {path}"
            raise SourceUnavailableError(msg)

        try:
            payload = response.json()
        except ValueError as e:
            msg = f"{self._service} returned invalid JSON for {path}"
            raise SourceUnavailableError(msg) from e
        if payload is None:
            return None
        if not isinstance(payload, dict):
            msg = f"{self._service} returned an unexpected payload for {path}"
            raise SourceUnavailableError(msg)
        return payload

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class HttpJobSource(_HttpSource):
    """``JobSource`` backed by ``GET /api/v1/jobs/{id}/internal``."""

    _service = "Jobs service"

    async def get_job(self, job_id: str) -> JobData | None:
        payload = await self._get_json(f"/api/v1/jobs/{job_id}/internal")
        return JobData.from_payload(payload) if payload is not None else None


class HttpProfileSource(_HttpSource):
    """``ProfileSource`` backed by ``GET /api/v1/profiles/candidates/{id}/internal``."""

    _service = "Profiles service"

    async def get_candidate(self, user_id: str) -> CandidateData | None:
        payload = await self._get_json(f"/api/v1/profiles/candidates/{user_id}/internal")
        return CandidateData.from_payload(payload) if payload is not None else None
