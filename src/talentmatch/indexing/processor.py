"""DocumentProcessor — fetch, embed and index one document, then record the outcome."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from talentmatch.exceptions import DocumentNotFoundError
from talentmatch.indexing.types import ProcessResult
from talentmatch.models.records import DocumentType, EmbeddingStatus
from talentmatch.search.types import CandidateSearchDocument, JobSearchDocument
from talentmatch.text import build_candidate_text, build_job_text

if TYPE_CHECKING:
    from datetime import timedelta

    from talentmatch.indexing.store import EmbeddingRecordStore
    from talentmatch.search.protocols import EmbeddingProvider, VectorIndex
    from talentmatch.sources.protocols import JobSource, ProfileSource
    from talentmatch.sources.types import CandidateData, JobData

logger = logging.getLogger(__name__)

ABANDONED_MESSAGE = "previous attempt abandoned"


def job_search_document(job: JobData, embedding: list[float]) -> JobSearchDocument:
    """Project a job and its embedding into the indexed document."""
    return JobSearchDocument(
        id=job.id,
        title=job.title,
        embedding=embedding,
        created_at=job.created_at,
        description=job.description,
        requirements=job.requirements,
        company_name=job.company_name,
        location=job.location,
        country=job.country,
        work_mode=job.work_mode,
        experience_level=job.experience_level,
        job_type=job.job_type,
        salary_min=job.salary_min,
        salary_max=job.salary_max,
        salary_currency=job.salary_currency,
        is_salary_visible=job.is_salary_visible,
        skills=job.skills,
        servicenow_versions=job.servicenow_versions,
    )


def candidate_search_document(
    candidate: CandidateData, embedding: list[float]
) -> CandidateSearchDocument:
    """Project a candidate profile and its embedding into the indexed document."""
    return CandidateSearchDocument(
        id=candidate.user_id,
        full_name=candidate.full_name,
        embedding=embedding,
        updated_at=candidate.updated_at,
        headline=candidate.headline,
        summary=candidate.bio,
        current_role=candidate.current_role,
        location=candidate.location,
        country=candidate.country,
        years_of_experience=candidate.years_of_experience,
        experience_level=candidate.experience_level,
        availability=candidate.availability,
        open_to_remote=candidate.open_to_remote,
        skills=candidate.skills,
        certifications=candidate.certifications,
        servicenow_versions=candidate.servicenow_versions,
    )


class DocumentProcessor:
    """Runs one indexing attempt for a single document.

    The record is claimed (moved to Processing with a compare-and-set) and
    persisted before any external call.  The document is then fetched,
    rendered to canonical text, embedded and written to the vector index as
    a whole.  The attempt ends with a second compare-and-set to Indexed or
    Failed.  Every failure is contained to the one record.

    Inactive jobs are removed from the index and count as a success.  A
    document the source no longer has is removed from the index and its
    retries are exhausted immediately.

    A record already in Processing belongs to another attempt.  It is taken
    over only when its claim is older than *stale_after*; without a window
    such records are always left alone.
    """

    def __init__(
        self,
        store: EmbeddingRecordStore,
        index: VectorIndex,
        embeddings: EmbeddingProvider,
        jobs: JobSource,
        profiles: ProfileSource,
        *,
        worker_id: str | None = None,
        stale_after: timedelta | None = None,
    ) -> None:
        self._store = store
        self._index = index
        self._embeddings = embeddings
        self._jobs = jobs
        self._profiles = profiles
        self._worker_id = worker_id
        self._stale_after = stale_after

    @property
    def stale_after(self) -> timedelta | None:
        return self._stale_after

    async def process(self, document_id: str, document_type: DocumentType) -> ProcessResult:
        record = await self._store.get_by_document(document_id, document_type)
        if record is None:
            logger.warning(
                "No embedding record for %s %s; nothing to process",
                document_type.value,
                document_id,
            )
            return ProcessResult(document_id, document_type, status=None, skipped=True)

        expected_status = record.status
        expected_updated_at = record.updated_at

        if expected_status is EmbeddingStatus.PROCESSING:
            if not self._is_stale(expected_updated_at):
                return self._lost_claim(document_id, document_type)
            record.mark_failed(ABANDONED_MESSAGE)
            if not record.can_retry:
                claimed = await self._store.transition(
                    record,
                    expected_status=expected_status,
                    expected_updated_at=expected_updated_at,
                )
                if not claimed:
                    return self._lost_claim(document_id, document_type)
                logger.warning(
                    "Giving up on %s %s after %d abandoned attempts",
                    document_type.value,
                    document_id,
                    record.retry_count,
                )
                return ProcessResult(
                    document_id, document_type, status=EmbeddingStatus.FAILED, error=ABANDONED_MESSAGE
                )

        record.mark_processing(self._worker_id)
        claimed_at = record.updated_at
        claimed = await self._store.transition(
            record,
            expected_status=expected_status,
            expected_updated_at=expected_updated_at,
        )
        if not claimed:
            return self._lost_claim(document_id, document_type)

        error: str | None = None
        try:
            if document_type is DocumentType.JOB:
                await self._index_job(document_id)
            else:
                await self._index_candidate(document_id)
        except DocumentNotFoundError as e:
            error = str(e)
            logger.warning("%s Removed from index; retries exhausted.", error)
            record.mark_failed(error, exhausted=True)
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.error(
                "Failed to index %s %s: %s", document_type.value, document_id, error, exc_info=True
            )
            record.mark_failed(error)
        else:
            record.mark_indexed()
            logger.info("Indexed %s %s", document_type.value, document_id)

        finished = await self._store.transition(
            record,
            expected_status=EmbeddingStatus.PROCESSING,
            expected_updated_at=claimed_at,
        )
        if not finished:
            # Re-requested mid-flight: the newer version is picked up next tick.
            logger.info(
                "%s %s changed while processing; leaving it queued",
                document_type.value,
                document_id,
            )
            current = await self._store.get_by_document(document_id, document_type)
            return ProcessResult(
                document_id,
                document_type,
                status=current.status if current is not None else None,
                skipped=True,
                error=error,
            )

        return ProcessResult(document_id, document_type, status=record.status, error=error)

    # ------------------------------------------------------------------
    # Per-type pipelines
    # ------------------------------------------------------------------

    async def _index_job(self, job_id: str) -> None:
        job = await self._jobs.get_job(job_id)
        if job is None:
            await self._index.delete(job_id, DocumentType.JOB)
            raise DocumentNotFoundError(job_id, DocumentType.JOB.value)

        if not job.is_active:
            await self._index.delete(job_id, DocumentType.JOB)
            logger.info("Job %s is inactive; removed from index", job_id)
            return

        embedding = await self._embeddings.embed(build_job_text(job))
        await self._index.upsert_job(job_search_document(job, embedding))

    async def _index_candidate(self, user_id: str) -> None:
        candidate = await self._profiles.get_candidate(user_id)
        if candidate is None:
            await self._index.delete(user_id, DocumentType.CANDIDATE_PROFILE)
            raise DocumentNotFoundError(user_id, DocumentType.CANDIDATE_PROFILE.value)

        embedding = await self._embeddings.embed(build_candidate_text(candidate))
        await self._index.upsert_candidate(candidate_search_document(candidate, embedding))

    @staticmethod
    def _lost_claim(document_id: str, document_type: DocumentType) -> ProcessResult:
        logger.warning(
            "%s %s was claimed by another worker; skipping", document_type.value, document_id
        )
        return ProcessResult(document_id, document_type, status=None, skipped=True)

    def _is_stale(self, claimed_at: datetime) -> bool:
        if self._stale_after is None:
            return False
        if claimed_at.tzinfo is None:
            claimed_at = claimed_at.replace(tzinfo=UTC)
        return claimed_at < datetime.now(UTC) - self._stale_after
