"""End-to-end tests for the MatchingAsync facade."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from talentmatch import MatchingAsync, MatchingConfig
from talentmatch.events import DocumentEvent, EventType
from talentmatch.exceptions import AccessDeniedError, DocumentNotFoundError
from talentmatch.matching.types import Principal
from talentmatch.models.records import DocumentType, EmbeddingStatus
from talentmatch.search._index import DocumentVectorIndex
from talentmatch.search.providers.hashing import HashEmbedding
from talentmatch.search.stores.local import LocalVectorStore
from talentmatch.search.stores.memory import MemoryVectorStore
from talentmatch.sources.http import HttpJobSource
from talentmatch.sources.memory import InMemoryJobSource, InMemoryProfileSource

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from pathlib import Path

    from talentmatch.sources.types import CandidateData, JobData

DIM = 32

CANDIDATE = Principal("cand-1", frozenset({"Candidate"}))
EMPLOYER = Principal("employer-1", frozenset({"Employer"}))
ADMIN = Principal("admin", frozenset({"Admin"}))


@pytest.fixture
async def matching(
    tmp_path: Path,
    jobs: InMemoryJobSource,
    profiles: InMemoryProfileSource,
) -> AsyncIterator[MatchingAsync]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'facade.db'}")
    service = MatchingAsync(
        engine=engine,
        owns_engine=True,
        embedding_provider=HashEmbedding(DIM),
        index=DocumentVectorIndex(
            MemoryVectorStore(dimension=DIM), MemoryVectorStore(dimension=DIM)
        ),
        jobs=jobs,
        profiles=profiles,
        worker_id="test-worker",
        poll_interval=0.01,
    )
    async with service:
        yield service


# =========================================================================
# Construction
# =========================================================================


class TestConstruction:
    def test_requires_engine_or_factory(self) -> None:
        kwargs = {
            "embedding_provider": HashEmbedding(DIM),
            "index": AsyncMock(),
            "jobs": InMemoryJobSource(),
            "profiles": InMemoryProfileSource(),
        }
        with pytest.raises(ValueError, match="engine or session_factory"):
            MatchingAsync(**kwargs)
        with pytest.raises(ValueError, match="not both"):
            MatchingAsync(engine=AsyncMock(), session_factory=AsyncMock(), **kwargs)

    async def test_from_config_defaults(self, tmp_path: Path) -> None:
        config = MatchingConfig(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'cfg.db'}",
            embedding_dimensions=16,
        )
        async with MatchingAsync.from_config(config) as service:
            snap = await service.request_indexing("job-1", DocumentType.JOB)
            assert snap.status is EmbeddingStatus.PENDING
            store = service.index.store_for(DocumentType.JOB)  # type: ignore[attr-defined]
            assert isinstance(store, MemoryVectorStore)

    async def test_from_config_local_store_and_http_sources(self, tmp_path: Path) -> None:
        config = MatchingConfig(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'cfg.db'}",
            embedding_dimensions=16,
            vector_store="local",
            vector_index_dir=str(tmp_path / "vectors"),
            jobs_service_url="http://jobs.local",
            profiles_service_url="http://profiles.local",
        )
        service = MatchingAsync.from_config(config)
        try:
            store = service.index.store_for(DocumentType.CANDIDATE_PROFILE)  # type: ignore[attr-defined]
            assert isinstance(store, LocalVectorStore)
            assert store.index_name == "candidates"
            assert isinstance(service._jobs, HttpJobSource)
        finally:
            await service.close()
        assert (tmp_path / "vectors" / "jobs" / "vectors_meta.json").exists()


# =========================================================================
# Full pipeline
# =========================================================================


class TestPipeline:
    async def test_request_process_and_match(
        self,
        matching: MatchingAsync,
        jobs: InMemoryJobSource,
        profiles: InMemoryProfileSource,
        make_job: Callable[..., JobData],
        make_candidate: Callable[..., CandidateData],
    ) -> None:
        profiles.seed(make_candidate())
        for i in range(3):
            jobs.seed(make_job(f"job-{i}", title=f"Developer {i}"))
            await matching.request_job_indexing(f"job-{i}", EMPLOYER)

        not_ready = await matching.jobs_for_candidate("cand-1", CANDIDATE)
        assert not_ready.embedding_ready is False

        snap = await matching.request_profile_indexing(CANDIDATE)
        assert snap.document_type is DocumentType.CANDIDATE_PROFILE

        batch = await matching.run_worker_once()
        assert batch.indexed == 4

        res = await matching.jobs_for_candidate("cand-1", CANDIDATE)
        assert res.embedding_ready is True
        assert res.total == 3
        assert {m.job_id for m in res.results} == {"job-0", "job-1", "job-2"}
        scores = [m.score for m in res.results]
        assert scores == sorted(scores, reverse=True)

        res = await matching.candidates_for_job("job-0", EMPLOYER)
        assert [m.user_id for m in res.results] == ["cand-1"]

        status = await matching.get_status("job-0", DocumentType.JOB)
        assert status is not None
        assert status.status is EmbeddingStatus.INDEXED
        assert status.last_indexed_at is not None

    async def test_process_directly(
        self,
        matching: MatchingAsync,
        jobs: InMemoryJobSource,
        make_job: Callable[..., JobData],
    ) -> None:
        jobs.seed(make_job())
        await matching.request_indexing("job-1", DocumentType.JOB)
        result = await matching.process("job-1", DocumentType.JOB)
        assert result.indexed

    async def test_get_status_unknown(self, matching: MatchingAsync) -> None:
        assert await matching.get_status("nope", DocumentType.JOB) is None


class TestEvents:
    async def test_written_event_requests_indexing(self, matching: MatchingAsync) -> None:
        await matching.emit(DocumentEvent(EventType.DOCUMENT_WRITTEN, "job-9", DocumentType.JOB))
        status = await matching.get_status("job-9", DocumentType.JOB)
        assert status is not None
        assert status.status is EmbeddingStatus.PENDING

    async def test_deleted_event_removes_from_index(
        self,
        matching: MatchingAsync,
        jobs: InMemoryJobSource,
        make_job: Callable[..., JobData],
    ) -> None:
        jobs.seed(make_job())
        await matching.emit(DocumentEvent(EventType.DOCUMENT_WRITTEN, "job-1", DocumentType.JOB))
        await matching.run_worker_once()
        assert await matching.index.fetch_vector("job-1", DocumentType.JOB) is not None

        jobs.remove("job-1")
        await matching.emit(DocumentEvent(EventType.DOCUMENT_DELETED, "job-1", DocumentType.JOB))
        await matching.run_worker_once()

        assert await matching.index.fetch_vector("job-1", DocumentType.JOB) is None
        status = await matching.get_status("job-1", DocumentType.JOB)
        assert status is not None
        assert status.status is EmbeddingStatus.FAILED

    def test_handlers_registered(self, matching: MatchingAsync) -> None:
        assert matching.event_bus.handler_count == 2


class TestJobIndexingAccess:
    async def test_unknown_job(self, matching: MatchingAsync) -> None:
        with pytest.raises(DocumentNotFoundError):
            await matching.request_job_indexing("nope", EMPLOYER)

    async def test_not_owner(
        self,
        matching: MatchingAsync,
        jobs: InMemoryJobSource,
        make_job: Callable[..., JobData],
    ) -> None:
        jobs.seed(make_job(employer_id="someone-else"))
        with pytest.raises(AccessDeniedError):
            await matching.request_job_indexing("job-1", EMPLOYER)

    async def test_admin_skips_ownership(self, matching: MatchingAsync) -> None:
        snap = await matching.request_job_indexing("any-job", ADMIN)
        assert snap.status is EmbeddingStatus.PENDING


class TestWorkerAndHealth:
    async def test_health(self, matching: MatchingAsync) -> None:
        await matching.request_indexing("job-1", DocumentType.JOB)
        health = await matching.health()
        assert health["records"]["Pending"] == 1
        assert health["records"]["Indexed"] == 0
        assert health["worker"] == {"id": "test-worker", "running": False, "ticks": 0}

    def test_processor_shares_stale_window(self, matching: MatchingAsync) -> None:
        assert matching.processor.stale_after == matching.worker.stale_after
        assert matching.worker.stale_after == timedelta(seconds=0.04)

    async def test_start_and_close_stops_worker(self, matching: MatchingAsync) -> None:
        matching.start_worker()
        assert matching.worker.running
        await matching.stop_worker()
        assert not matching.worker.running

    async def test_close_is_idempotent(self, matching: MatchingAsync) -> None:
        await matching.close()
        await matching.close()
