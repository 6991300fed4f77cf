"""Document source protocols — fetch canonical job/candidate data by id."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from talentmatch.sources.types import CandidateData, JobData


@runtime_checkable
class JobSource(Protocol):
    """Read access to job postings owned by the jobs service.

    ``get_job`` returns ``None`` when the job does not exist and raises
    :class:`~talentmatch.exceptions.SourceUnavailableError` when the
    service cannot answer.
    """

    async def get_job(self, job_id: str) -> JobData | None:
        """Fetch a job by id."""
        ...


@runtime_checkable
class ProfileSource(Protocol):
    """Read access to candidate profiles owned by the profiles service.

    Same not-found / unavailable contract as :class:`JobSource`.
    """

    async def get_candidate(self, user_id: str) -> CandidateData | None:
        """Fetch a candidate profile by user id."""
        ...
