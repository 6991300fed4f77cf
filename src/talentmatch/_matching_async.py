"""MatchingAsync — async facade wiring record store, index, sources, and worker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from talentmatch.events import DocumentEvent, EventBus, EventType
from talentmatch.exceptions import AccessDeniedError, DocumentNotFoundError
from talentmatch.indexing.processor import DocumentProcessor
from talentmatch.indexing.requests import request_indexing
from talentmatch.indexing.store import EmbeddingRecordStore
from talentmatch.indexing.types import EmbeddingStatusSnapshot
from talentmatch.indexing.worker import IndexingWorker, default_worker_id, stale_window
from talentmatch.matching.retrieval import DEFAULT_PAGE_SIZE, DEFAULT_TOP_K, MatchRetrieval
from talentmatch.models.records import DocumentType, EmbeddingRecord
from talentmatch.search._index import DocumentVectorIndex

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncEngine

    from talentmatch.config import MatchingConfig
    from talentmatch.indexing.types import BatchResult, ProcessResult
    from talentmatch.matching.types import CandidateMatch, JobMatch, MatchResults, Principal
    from talentmatch.models.records import EmbeddingRecordBase, EmbeddingStatus
    from talentmatch.search.protocols import EmbeddingProvider, VectorIndex, VectorStore
    from talentmatch.sources.protocols import JobSource, ProfileSource

logger = logging.getLogger(__name__)


class MatchingAsync:
    """Async facade for the semantic matching service.

    Owns the embedding-record store, the document processor, the indexing
    worker, and match retrieval, and exposes their operations.  Pass either
    an *engine* (tables are created on :meth:`open`) or a ready
    *session_factory*::

        engine = create_async_engine("sqlite+aiosqlite:///talentmatch.db")
        matching = MatchingAsync(
            engine=engine,
            embedding_provider=HashEmbedding(384),
            index=DocumentVectorIndex(MemoryVectorStore(dimension=384),
                                      MemoryVectorStore(dimension=384)),
            jobs=jobs_source,
            profiles=profile_source,
        )
        async with matching:
            await matching.request_indexing("job-1", DocumentType.JOB)
            await matching.run_worker_once()
    """

    def __init__(
        self,
        *,
        embedding_provider: EmbeddingProvider,
        index: VectorIndex,
        jobs: JobSource,
        profiles: ProfileSource,
        engine: AsyncEngine | None = None,
        session_factory: Callable[..., AsyncSession] | None = None,
        record_model: type[EmbeddingRecordBase] | None = None,
        worker_id: str | None = None,
        poll_interval: float = 15.0,
        batch_size: int = 10,
        max_concurrency: int | None = None,
        stale_after: float | None = None,
        top_k: int = DEFAULT_TOP_K,
        owns_engine: bool = False,
    ) -> None:
        if engine is not None and session_factory is not None:
            raise ValueError("Provide engine or session_factory, not both")
        if engine is None and session_factory is None:
            raise ValueError("Provide engine or session_factory")

        self._engine = engine
        self._owns_engine = owns_engine
        self._record_model = record_model or EmbeddingRecord
        if session_factory is None:
            session_factory = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        self._session_factory = session_factory

        self._embedding_provider = embedding_provider
        self._index = index
        self._jobs = jobs
        self._profiles = profiles
        self._worker_id = worker_id or default_worker_id()

        self._store = EmbeddingRecordStore(session_factory, self._record_model)
        stale = stale_window(poll_interval, stale_after)
        self._processor = DocumentProcessor(
            self._store,
            index,
            embedding_provider,
            jobs,
            profiles,
            worker_id=self._worker_id,
            stale_after=stale,
        )
        self._worker = IndexingWorker(
            self._store,
            self._processor,
            poll_interval=poll_interval,
            batch_size=batch_size,
            max_concurrency=max_concurrency,
            stale_after=stale_after,
        )
        self._retrieval = MatchRetrieval(self._store, index, jobs, profiles, top_k=top_k)

        self._event_bus = EventBus()
        self._event_bus.register(EventType.DOCUMENT_WRITTEN, self._on_document_changed)
        self._event_bus.register(EventType.DOCUMENT_DELETED, self._on_document_changed)

        self._opened = False
        self._closed = False

    # ------------------------------------------------------------------
    # Construction from configuration
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, config: MatchingConfig) -> MatchingAsync:
        """Build every collaborator from *config*."""
        provider = _build_provider(config)
        dimension = provider.dimensions
        index = DocumentVectorIndex(
            _build_store(config, "jobs", dimension),
            _build_store(config, "candidates", dimension),
        )
        jobs, profiles = _build_sources(config)
        engine = create_async_engine(config.database_url)
        return cls(
            embedding_provider=provider,
            index=index,
            jobs=jobs,
            profiles=profiles,
            engine=engine,
            owns_engine=True,
            worker_id=config.worker_id,
            poll_interval=config.poll_interval,
            batch_size=config.batch_size,
            max_concurrency=config.max_concurrency,
            stale_after=config.stale_after,
            top_k=config.top_k,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Create tables (when built from an engine) and connect the index."""
        if self._opened:
            return
        if self._engine is not None:
            model = self._record_model
            async with self._engine.begin() as conn:
                await conn.run_sync(
                    lambda c: model.__table__.create(c, checkfirst=True)  # type: ignore[attr-defined]
                )
        connect = getattr(self._index, "connect", None)
        if connect is not None:
            await connect()
        self._opened = True
        logger.info("Matching service opened (worker id %s)", self._worker_id)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        await self.stop_worker()
        for resource in (self._index, self._jobs, self._profiles, self._embedding_provider):
            close = getattr(resource, "close", None)
            if close is not None:
                await close()
        if self._engine is not None and self._owns_engine:
            await self._engine.dispose()
        logger.info("Matching service closed")

    async def __aenter__(self) -> MatchingAsync:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Indexing requests
    # ------------------------------------------------------------------

    async def request_indexing(
        self, document_id: str, document_type: DocumentType
    ) -> EmbeddingStatusSnapshot:
        """Queue *document_id* for (re-)indexing and return its status."""
        return await request_indexing(self._store, document_id, document_type)

    async def request_profile_indexing(self, principal: Principal) -> EmbeddingStatusSnapshot:
        """Queue the caller's own candidate profile."""
        return await self.request_indexing(principal.user_id, DocumentType.CANDIDATE_PROFILE)

    async def request_job_indexing(
        self, job_id: str, principal: Principal
    ) -> EmbeddingStatusSnapshot:
        """Queue a job; the caller must own it or be an administrator."""
        if not principal.is_admin:
            job = await self._jobs.get_job(job_id)
            if job is None:
                raise DocumentNotFoundError(job_id, DocumentType.JOB.value)
            if job.employer_id != principal.user_id:
                raise AccessDeniedError
        return await self.request_indexing(job_id, DocumentType.JOB)

    async def get_status(
        self, document_id: str, document_type: DocumentType
    ) -> EmbeddingStatusSnapshot | None:
        record = await self._store.get_by_document(document_id, document_type)
        return EmbeddingStatusSnapshot.from_record(record) if record is not None else None

    async def emit(self, event: DocumentEvent) -> None:
        """Publish a document change; indexing is requested for it."""
        await self._event_bus.emit(event)

    async def _on_document_changed(self, event: DocumentEvent) -> None:
        await self.request_indexing(event.document_id, event.document_type)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def process(self, document_id: str, document_type: DocumentType) -> ProcessResult:
        """Run one indexing attempt for a document right now."""
        return await self._processor.process(document_id, document_type)

    async def run_worker_once(self) -> BatchResult:
        """Run a single worker tick in the caller's task."""
        return await self._worker.run_once()

    def start_worker(self) -> None:
        """Start the background indexing loop."""
        self._worker.start()

    async def stop_worker(self) -> None:
        if self._worker.running:
            await self._worker.stop()

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    async def jobs_for_candidate(
        self,
        candidate_id: str,
        principal: Principal,
        *,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> MatchResults[JobMatch]:
        return await self._retrieval.jobs_for_candidate(
            candidate_id, principal, page=page, page_size=page_size
        )

    async def candidates_for_job(
        self,
        job_id: str,
        principal: Principal,
        *,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> MatchResults[CandidateMatch]:
        return await self._retrieval.candidates_for_job(
            job_id, principal, page=page, page_size=page_size
        )

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def record_counts(self) -> dict[EmbeddingStatus, int]:
        return await self._store.count_by_status()

    async def health(self) -> dict[str, Any]:
        """Record counts by status and worker state."""
        counts = await self.record_counts()
        return {
            "records": {status.value: count for status, count in counts.items()},
            "worker": {
                "id": self._worker_id,
                "running": self._worker.running,
                "ticks": self._worker.ticks,
            },
        }

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def store(self) -> EmbeddingRecordStore:
        return self._store

    @property
    def index(self) -> VectorIndex:
        return self._index

    @property
    def processor(self) -> DocumentProcessor:
        return self._processor

    @property
    def worker(self) -> IndexingWorker:
        return self._worker

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def worker_id(self) -> str:
        return self._worker_id


# ------------------------------------------------------------------
# Builders
# ------------------------------------------------------------------


def _build_provider(config: MatchingConfig) -> EmbeddingProvider:
    if config.embedding_provider == "openai":
        from talentmatch.search.providers.openai import OpenAIEmbedding

        return OpenAIEmbedding(
            model=config.embedding_model or "text-embedding-3-small",
            dimensions=config.embedding_dimensions,
        )
    if config.embedding_provider == "sentence-transformers":
        from talentmatch.search.providers.sentence_transformers import (
            SentenceTransformerEmbedding,
        )

        return SentenceTransformerEmbedding(config.embedding_model or "all-MiniLM-L6-v2")

    from talentmatch.search.providers.hashing import HashEmbedding

    return HashEmbedding(config.embedding_dimensions or 384)


def _build_store(config: MatchingConfig, name: str, dimension: int) -> VectorStore:
    if config.vector_store == "pinecone":
        from talentmatch.search.stores.pinecone import PineconeVectorStore

        return PineconeVectorStore(
            index_name=f"{config.pinecone_index_prefix}-{name}", dimension=dimension
        )
    if config.vector_store == "local":
        from talentmatch.search.stores.local import LocalVectorStore

        directory = (
            str(Path(config.vector_index_dir) / name) if config.vector_index_dir else None
        )
        return LocalVectorStore(dimension=dimension, name=name, directory=directory)

    from talentmatch.search.stores.memory import MemoryVectorStore

    return MemoryVectorStore(dimension=dimension, name=name)


def _build_sources(config: MatchingConfig) -> tuple[JobSource, ProfileSource]:
    if config.uses_http_sources:
        from talentmatch.sources.http import HttpJobSource, HttpProfileSource

        return (
            HttpJobSource(config.jobs_service_url, timeout=config.http_timeout),
            HttpProfileSource(config.profiles_service_url, timeout=config.http_timeout),
        )

    from talentmatch.sources.memory import InMemoryJobSource, InMemoryProfileSource

    logger.warning("No service URLs configured; using empty in-memory document sources")
    return InMemoryJobSource(), InMemoryProfileSource()
