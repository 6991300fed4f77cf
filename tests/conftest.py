"""Shared fixtures for talentmatch tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from talentmatch.indexing.processor import DocumentProcessor
from talentmatch.indexing.store import EmbeddingRecordStore
from talentmatch.matching.retrieval import MatchRetrieval
from talentmatch.models.records import EmbeddingRecord  # noqa: F401  (registers the table)
from talentmatch.search._index import DocumentVectorIndex
from talentmatch.search.providers.hashing import HashEmbedding
from talentmatch.search.stores.memory import MemoryVectorStore
from talentmatch.sources.memory import InMemoryJobSource, InMemoryProfileSource
from talentmatch.sources.types import CandidateData, JobData

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

DIM = 32


@pytest.fixture
async def async_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Async SQLite engine on a temp file with all tables created."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'talentmatch.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> EmbeddingRecordStore:
    return EmbeddingRecordStore(session_factory)


@pytest.fixture
def provider() -> HashEmbedding:
    return HashEmbedding(DIM)


@pytest.fixture
def job_store() -> MemoryVectorStore:
    return MemoryVectorStore(dimension=DIM, name="jobs")


@pytest.fixture
def candidate_store() -> MemoryVectorStore:
    return MemoryVectorStore(dimension=DIM, name="candidates")


@pytest.fixture
def index(job_store: MemoryVectorStore, candidate_store: MemoryVectorStore) -> DocumentVectorIndex:
    return DocumentVectorIndex(job_store, candidate_store)


@pytest.fixture
def jobs() -> InMemoryJobSource:
    return InMemoryJobSource()


@pytest.fixture
def profiles() -> InMemoryProfileSource:
    return InMemoryProfileSource()


@pytest.fixture
def processor(
    store: EmbeddingRecordStore,
    index: DocumentVectorIndex,
    provider: HashEmbedding,
    jobs: InMemoryJobSource,
    profiles: InMemoryProfileSource,
) -> DocumentProcessor:
    return DocumentProcessor(store, index, provider, jobs, profiles, worker_id="test-worker")


@pytest.fixture
def retrieval(
    store: EmbeddingRecordStore,
    index: DocumentVectorIndex,
    jobs: InMemoryJobSource,
    profiles: InMemoryProfileSource,
) -> MatchRetrieval:
    return MatchRetrieval(store, index, jobs, profiles)


# ------------------------------------------------------------------
# Document factories
# ------------------------------------------------------------------


@pytest.fixture
def make_job() -> Callable[..., JobData]:
    def _make(job_id: str = "job-1", **overrides: Any) -> JobData:
        fields: dict[str, Any] = {
            "id": job_id,
            "employer_id": "employer-1",
            "title": "ServiceNow Developer",
            "description": "Build and maintain ITSM workflows.",
            "requirements": "3+ years on the platform",
            "company_name": "Acme",
            "location": "London",
            "country": "UK",
            "work_mode": "Remote",
            "experience_level": "Mid",
            "job_type": "FullTime",
            "salary_min": 50000.0,
            "salary_max": 70000.0,
            "salary_currency": "GBP",
            "is_salary_visible": True,
            "skills": ("ITSM", "JavaScript", "Flow Designer"),
            "servicenow_versions": ("Washington",),
            "is_active": True,
            "created_at": datetime(2025, 1, 1, tzinfo=UTC),
        }
        fields.update(overrides)
        return JobData(**fields)

    return _make


@pytest.fixture
def make_candidate() -> Callable[..., CandidateData]:
    def _make(user_id: str = "cand-1", **overrides: Any) -> CandidateData:
        fields: dict[str, Any] = {
            "user_id": user_id,
            "first_name": "Ada",
            "last_name": "Lovelace",
            "headline": "Senior ServiceNow Developer",
            "bio": "Ten years of platform work.",
            "current_role": "Developer",
            "location": "Leeds",
            "country": "UK",
            "years_of_experience": 10,
            "experience_level": "Senior",
            "availability": "Immediately",
            "open_to_remote": True,
            "skills": ("itsm", "JavaScript", "CMDB"),
            "certifications": ("CSA",),
            "servicenow_versions": ("Washington",),
            "updated_at": datetime(2025, 1, 1, tzinfo=UTC),
        }
        fields.update(overrides)
        return CandidateData(**fields)

    return _make
