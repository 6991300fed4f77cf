"""Tests for IndexingWorker."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest

from talentmatch.indexing.requests import request_indexing
from talentmatch.indexing.types import BatchResult, ProcessResult
from talentmatch.indexing.worker import IndexingWorker, default_worker_id, stale_window
from talentmatch.models.records import MAX_RETRIES, DocumentType, EmbeddingStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from talentmatch.indexing.processor import DocumentProcessor
    from talentmatch.indexing.store import EmbeddingRecordStore
    from talentmatch.search.providers.hashing import HashEmbedding
    from talentmatch.search.stores.memory import MemoryVectorStore
    from talentmatch.sources.memory import InMemoryJobSource, InMemoryProfileSource
    from talentmatch.sources.types import CandidateData, JobData


@pytest.fixture
def worker(store: EmbeddingRecordStore, processor: DocumentProcessor) -> IndexingWorker:
    return IndexingWorker(store, processor, poll_interval=0.01, batch_size=10, stale_after=60)


# =========================================================================
# Construction
# =========================================================================


class TestConstruction:
    @pytest.mark.parametrize(
        "kwargs",
        [{"poll_interval": 0}, {"batch_size": 0}, {"max_concurrency": -1}],
    )
    def test_rejects_non_positive(
        self,
        store: EmbeddingRecordStore,
        processor: DocumentProcessor,
        kwargs: dict[str, float],
    ) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            IndexingWorker(store, processor, **kwargs)

    def test_defaults(self, store: EmbeddingRecordStore, processor: DocumentProcessor) -> None:
        w = IndexingWorker(store, processor)
        assert w.poll_interval == 15.0
        assert w.batch_size == 10
        assert w.stale_after == timedelta(seconds=60)
        assert not w.running
        assert w.ticks == 0

    def test_default_worker_id_unique(self) -> None:
        assert default_worker_id() != default_worker_id()

    def test_stale_window(self) -> None:
        assert stale_window(2.0) == timedelta(seconds=8)
        assert stale_window(2.0, 30) == timedelta(seconds=30)


# =========================================================================
# run_once
# =========================================================================


class TestRunOnce:
    async def test_empty_queue(self, worker: IndexingWorker) -> None:
        result = await worker.run_once()
        assert result.processed == 0
        assert result.indexed == 0

    async def test_indexes_batch(
        self,
        worker: IndexingWorker,
        store: EmbeddingRecordStore,
        jobs: InMemoryJobSource,
        profiles: InMemoryProfileSource,
        job_store: MemoryVectorStore,
        candidate_store: MemoryVectorStore,
        make_job: Callable[..., JobData],
        make_candidate: Callable[..., CandidateData],
    ) -> None:
        for i in range(3):
            jobs.seed(make_job(f"job-{i}"))
            await request_indexing(store, f"job-{i}", DocumentType.JOB)
        profiles.seed(make_candidate())
        await request_indexing(store, "cand-1", DocumentType.CANDIDATE_PROFILE)

        result = await worker.run_once()

        assert result.processed == 4
        assert result.indexed == 4
        assert result.failed == 0
        assert len(job_store) == 3
        assert len(candidate_store) == 1
        counts = await store.count_by_status()
        assert counts[EmbeddingStatus.INDEXED] == 4
        assert await worker.run_once() == BatchResult()

    async def test_respects_batch_size(
        self,
        store: EmbeddingRecordStore,
        processor: DocumentProcessor,
        jobs: InMemoryJobSource,
        make_job: Callable[..., JobData],
    ) -> None:
        for i in range(5):
            jobs.seed(make_job(f"job-{i}"))
            await request_indexing(store, f"job-{i}", DocumentType.JOB)
        w = IndexingWorker(store, processor, poll_interval=1, batch_size=2)

        first = await w.run_once()
        assert first.processed == 2
        counts = await store.count_by_status()
        assert counts[EmbeddingStatus.PENDING] == 3

    async def test_failures_are_isolated(
        self,
        worker: IndexingWorker,
        store: EmbeddingRecordStore,
        jobs: InMemoryJobSource,
        make_job: Callable[..., JobData],
    ) -> None:
        jobs.seed(make_job("good"))
        await request_indexing(store, "good", DocumentType.JOB)
        await request_indexing(store, "missing", DocumentType.JOB)

        result = await worker.run_once()

        assert result.processed == 2
        assert result.indexed == 1
        assert result.failed == 1
        good = await store.get_by_document("good", DocumentType.JOB)
        assert good is not None
        assert good.status is EmbeddingStatus.INDEXED

    async def test_unhandled_exception_counts_failed(
        self,
        worker: IndexingWorker,
        store: EmbeddingRecordStore,
        processor: DocumentProcessor,
    ) -> None:
        await request_indexing(store, "a", DocumentType.JOB)
        await request_indexing(store, "b", DocumentType.JOB)

        async def flaky(document_id: str, document_type: DocumentType) -> ProcessResult:
            if document_id == "a":
                raise RuntimeError("database went away")
            return ProcessResult(document_id, document_type, status=EmbeddingStatus.INDEXED)

        with patch.object(processor, "process", side_effect=flaky):
            result = await worker.run_once()

        assert result.processed == 2
        assert result.failed == 1
        assert result.indexed == 1

    async def test_skipped_counted(
        self,
        worker: IndexingWorker,
        store: EmbeddingRecordStore,
        processor: DocumentProcessor,
    ) -> None:
        await request_indexing(store, "a", DocumentType.JOB)
        skipped = ProcessResult("a", DocumentType.JOB, status=None, skipped=True)
        with patch.object(processor, "process", AsyncMock(return_value=skipped)):
            result = await worker.run_once()
        assert result.skipped == 1

    async def test_concurrency_limit(
        self,
        store: EmbeddingRecordStore,
        processor: DocumentProcessor,
    ) -> None:
        for i in range(6):
            await request_indexing(store, f"job-{i}", DocumentType.JOB)
        w = IndexingWorker(store, processor, poll_interval=1, batch_size=6, max_concurrency=2)

        in_flight = 0
        peak = 0

        async def slow(document_id: str, document_type: DocumentType) -> ProcessResult:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return ProcessResult(document_id, document_type, status=EmbeddingStatus.INDEXED)

        with patch.object(processor, "process", side_effect=slow):
            result = await w.run_once()

        assert result.indexed == 6
        assert peak == 2


# =========================================================================
# Retry budget across ticks
# =========================================================================


class TestRetryBudget:
    async def test_gives_up_after_max_retries_until_requested(
        self,
        worker: IndexingWorker,
        store: EmbeddingRecordStore,
        jobs: InMemoryJobSource,
        provider: HashEmbedding,
        make_job: Callable[..., JobData],
    ) -> None:
        jobs.seed(make_job())
        await request_indexing(store, "job-1", DocumentType.JOB)

        with patch.object(provider, "embed", AsyncMock(side_effect=RuntimeError("down"))):
            for _ in range(MAX_RETRIES):
                result = await worker.run_once()
                assert result.failed == 1
            assert (await worker.run_once()).processed == 0

        record = await store.get_by_document("job-1", DocumentType.JOB)
        assert record is not None
        assert record.status is EmbeddingStatus.FAILED
        assert record.retry_count == MAX_RETRIES

        await request_indexing(store, "job-1", DocumentType.JOB)
        result = await worker.run_once()
        assert result.indexed == 1
        record = await store.get_by_document("job-1", DocumentType.JOB)
        assert record is not None
        assert record.retry_count == 0


# =========================================================================
# Loop lifecycle
# =========================================================================


class TestLoop:
    async def test_start_and_stop(
        self,
        worker: IndexingWorker,
        store: EmbeddingRecordStore,
        jobs: InMemoryJobSource,
        make_job: Callable[..., JobData],
    ) -> None:
        jobs.seed(make_job())
        await request_indexing(store, "job-1", DocumentType.JOB)

        worker.start()
        assert worker.running
        for _ in range(100):
            if worker.ticks > 0:
                break
            await asyncio.sleep(0.01)
        await worker.stop()

        assert not worker.running
        assert worker.ticks >= 1
        record = await store.get_by_document("job-1", DocumentType.JOB)
        assert record is not None
        assert record.status is EmbeddingStatus.INDEXED

    async def test_double_start_rejected(self, worker: IndexingWorker) -> None:
        worker.start()
        try:
            with pytest.raises(RuntimeError, match="already running"):
                worker.start()
        finally:
            await worker.stop()

    async def test_survives_failing_tick(
        self, worker: IndexingWorker, store: EmbeddingRecordStore
    ) -> None:
        calls = 0

        async def broken(*args: object, **kwargs: object) -> list[object]:
            nonlocal calls
            calls += 1
            raise RuntimeError("database locked")

        with patch.object(store, "get_pending", side_effect=broken):
            worker.start()
            for _ in range(100):
                if calls >= 3:
                    break
                await asyncio.sleep(0.01)
            await worker.stop()

        assert calls >= 3
        assert worker.ticks >= 3

    async def test_stop_without_start(self, worker: IndexingWorker) -> None:
        await worker.stop()
        assert not worker.running
