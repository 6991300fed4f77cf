"""In-memory document sources for local development and tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from talentmatch.sources.types import CandidateData, JobData


class InMemoryJobSource:
    """Seedable ``JobSource``."""

    def __init__(self, jobs: list[JobData] | None = None) -> None:
        self._jobs: dict[str, JobData] = {}
        for job in jobs or []:
            self.seed(job)

    def seed(self, job: JobData) -> None:
        """Add or replace *job*."""
        self._jobs[job.id] = job

    def remove(self, job_id: str) -> bool:
        return self._jobs.pop(job_id, None) is not None

    async def get_job(self, job_id: str) -> JobData | None:
        return self._jobs.get(job_id)

    def __len__(self) -> int:
        return len(self._jobs)


class InMemoryProfileSource:
    """Seedable ``ProfileSource``."""

    def __init__(self, candidates: list[CandidateData] | None = None) -> None:
        self._candidates: dict[str, CandidateData] = {}
        for candidate in candidates or []:
            self.seed(candidate)

    def seed(self, candidate: CandidateData) -> None:
        """Add or replace *candidate*."""
        self._candidates[candidate.user_id] = candidate

    def remove(self, user_id: str) -> bool:
        return self._candidates.pop(user_id, None) is not None

    async def get_candidate(self, user_id: str) -> CandidateData | None:
        return self._candidates.get(user_id)

    def __len__(self) -> int:
        return len(self._candidates)
