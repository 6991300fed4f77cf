"""MatchRetrieval — ranked jobs for a candidate and ranked candidates for a job."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

from talentmatch.exceptions import (
    AccessDeniedError,
    DocumentNotFoundError,
    InvalidRequestError,
    SourceUnavailableError,
)
from talentmatch.matching.types import CandidateMatch, JobMatch, MatchResults
from talentmatch.models.records import DocumentType, EmbeddingStatus

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence

    from talentmatch.indexing.store import EmbeddingRecordStore
    from talentmatch.matching.types import Principal
    from talentmatch.search.protocols import VectorIndex
    from talentmatch.search.types import ScoredDocument
    from talentmatch.sources.protocols import JobSource, ProfileSource
    from talentmatch.sources.types import CandidateData, JobData

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TOP_K: int = 100
DEFAULT_PAGE_SIZE: int = 10
MAX_PAGE_SIZE: int = 50
DEFAULT_ENRICH_CONCURRENCY: int = 10


# ------------------------------------------------------------------
# Scoring helpers
# ------------------------------------------------------------------


def clamp_score(score: float) -> float:
    """Clamp a cosine similarity into ``[0, 1]``."""
    return min(1.0, max(0.0, float(score)))


def score_percent(score: float) -> int:
    """Human-readable 0-100 percentage of a clamped score."""
    return round(score * 100)


def matched_skills(job_skills: Iterable[str], candidate_skills: Iterable[str]) -> tuple[str, ...]:
    """Job skills the candidate also lists, compared case-insensitively.

    Keeps the job's order and spelling and drops duplicates.
    """
    have = {s.casefold() for s in candidate_skills if s}
    seen: set[str] = set()
    out: list[str] = []
    for skill in job_skills:
        key = skill.casefold()
        if skill and key in have and key not in seen:
            seen.add(key)
            out.append(skill)
    return tuple(out)


def validate_paging(page: int, page_size: int) -> None:
    if page < 1:
        raise InvalidRequestError(f"page must be >= 1, got {page}")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise InvalidRequestError(f"pageSize must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")


def paginate(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """Return the 1-indexed *page* of *items*."""
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


# ------------------------------------------------------------------
# Retrieval
# ------------------------------------------------------------------


class MatchRetrieval:
    """Answers "jobs matching a candidate" and "candidates matching a job".

    The subject must be Indexed and have a vector in the index, otherwise
    the answer is an empty result flagged ``embedding_ready=False``.  The
    top *top_k* neighbours are enriched from the document sources (hits
    that cannot be fetched are dropped), then ranked by similarity
    descending, ties broken by recency (newest first) and then by id.
    """

    def __init__(
        self,
        store: EmbeddingRecordStore,
        index: VectorIndex,
        jobs: JobSource,
        profiles: ProfileSource,
        *,
        top_k: int = DEFAULT_TOP_K,
        enrich_concurrency: int = DEFAULT_ENRICH_CONCURRENCY,
    ) -> None:
        self._store = store
        self._index = index
        self._jobs = jobs
        self._profiles = profiles
        self._top_k = top_k
        self._enrich_concurrency = enrich_concurrency

    async def jobs_for_candidate(
        self,
        candidate_id: str,
        principal: Principal,
        *,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> MatchResults[JobMatch]:
        """Ranked active jobs for a candidate; callable by that candidate or an admin."""
        validate_paging(page, page_size)
        if principal.user_id != candidate_id and not principal.is_admin:
            raise AccessDeniedError

        vector = await self._subject_vector(candidate_id, DocumentType.CANDIDATE_PROFILE)
        if vector is None:
            return MatchResults.not_ready(page, page_size)

        candidate = await self._profiles.get_candidate(candidate_id)
        if candidate is None:
            logger.warning("Candidate %s is indexed but has no profile", candidate_id)
        candidate_skills = candidate.skills if candidate is not None else ()

        hits = await self._index.search_jobs_for_candidate(vector, self._top_k)
        jobs = await self._enrich(hits, self._jobs.get_job, DocumentType.JOB)

        matches = [
            self._job_match(job, hit.score, candidate_skills)
            for hit, job in zip(hits, jobs, strict=True)
            if job is not None and job.is_active
        ]
        matches.sort(key=lambda m: (-m.score, -m.posted_at.timestamp(), m.job_id))
        return MatchResults(
            total=len(matches),
            page=page,
            page_size=page_size,
            embedding_ready=True,
            results=paginate(matches, page, page_size),
        )

    async def candidates_for_job(
        self,
        job_id: str,
        principal: Principal,
        *,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> MatchResults[CandidateMatch]:
        """Ranked candidates for a job; callable by the job's employer or an admin.

        Existence and ownership are checked before readiness, so a caller
        who does not own the job is denied whatever its indexing state.
        """
        validate_paging(page, page_size)
        job = await self._jobs.get_job(job_id)
        if job is None:
            raise DocumentNotFoundError(job_id, DocumentType.JOB.value)
        if job.employer_id != principal.user_id and not principal.is_admin:
            raise AccessDeniedError

        vector = await self._subject_vector(job_id, DocumentType.JOB)
        if vector is None:
            return MatchResults.not_ready(page, page_size)

        hits = await self._index.search_candidates_for_job(vector, self._top_k)
        candidates = await self._enrich(
            hits, self._profiles.get_candidate, DocumentType.CANDIDATE_PROFILE
        )

        matches = [
            self._candidate_match(candidate, hit.score, job.skills)
            for hit, candidate in zip(hits, candidates, strict=True)
            if candidate is not None
        ]
        matches.sort(key=lambda m: (-m.score, -m.profile_updated_at.timestamp(), m.user_id))
        return MatchResults(
            total=len(matches),
            page=page,
            page_size=page_size,
            embedding_ready=True,
            results=paginate(matches, page, page_size),
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _subject_vector(
        self, document_id: str, document_type: DocumentType
    ) -> list[float] | None:
        record = await self._store.get_by_document(document_id, document_type)
        if record is None or record.status is not EmbeddingStatus.INDEXED:
            return None
        vector = await self._index.fetch_vector(document_id, document_type)
        if vector is None:
            logger.warning(
                "%s %s is marked Indexed but has no vector in the index",
                document_type.value,
                document_id,
            )
        return vector

    async def _enrich(
        self,
        hits: list[ScoredDocument],
        fetch: Callable[[str], Awaitable[T | None]],
        document_type: DocumentType,
    ) -> list[T | None]:
        semaphore = asyncio.Semaphore(self._enrich_concurrency)

        async def _one(hit: ScoredDocument) -> T | None:
            async with semaphore:
                try:
                    return await fetch(hit.id)
                except SourceUnavailableError as e:
                    logger.warning(
                        "Dropping %s %s from matches: %s", document_type.value, hit.id, e
                    )
                    return None

        return list(await asyncio.gather(*(_one(hit) for hit in hits)))

    @staticmethod
    def _job_match(job: JobData, raw_score: float, candidate_skills: Iterable[str]) -> JobMatch:
        score = clamp_score(raw_score)
        visible = job.is_salary_visible
        return JobMatch(
            job_id=job.id,
            title=job.title,
            company_name=job.company_name,
            location=job.location,
            country=job.country,
            work_mode=job.work_mode,
            experience_level=job.experience_level,
            salary_min=job.salary_min if visible else None,
            salary_max=job.salary_max if visible else None,
            salary_currency=job.salary_currency if visible else None,
            skills_required=job.skills,
            score=score,
            score_percent=score_percent(score),
            matched_skills=matched_skills(job.skills, candidate_skills),
            posted_at=job.created_at,
        )

    @staticmethod
    def _candidate_match(
        candidate: CandidateData, raw_score: float, job_skills: Iterable[str]
    ) -> CandidateMatch:
        score = clamp_score(raw_score)
        return CandidateMatch(
            user_id=candidate.user_id,
            full_name=candidate.full_name or None,
            headline=candidate.headline,
            current_role=candidate.current_role,
            location=candidate.location,
            years_of_experience=candidate.years_of_experience,
            experience_level=candidate.experience_level,
            availability=candidate.availability,
            skills=candidate.skills,
            certifications=candidate.certifications,
            score=score,
            score_percent=score_percent(score),
            matched_skills=matched_skills(job_skills, candidate.skills),
            profile_updated_at=candidate.updated_at,
        )
