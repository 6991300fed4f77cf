"""Search layer data types — vectors, store results, and search documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime


# ------------------------------------------------------------------
# Vector data
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VectorEntry:
    """A vector with its ID and metadata, ready for storage.

    Attributes:
        id: Unique identifier (the document id).
        vector: Embedding vector.
        metadata: JSON-safe key-value metadata stored alongside the vector.
    """

    id: str
    vector: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)


# ------------------------------------------------------------------
# Store results
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VectorSearchResult:
    """A single result from a VectorStore search.

    Attributes:
        id: Identifier of the matched entry.
        score: Cosine similarity (higher is more similar).
        metadata: Metadata stored with the vector.
    """

    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UpsertResult:
    """Result of a vector upsert operation."""

    upserted_count: int
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DeleteResult:
    """Result of a vector delete operation."""

    deleted_count: int


# ------------------------------------------------------------------
# Search documents
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class JobSearchDocument:
    """Search projection of an active job plus its embedding.

    Rebuilt from scratch on every index pass; never patched in place.
    """

    id: str
    title: str
    embedding: list[float]
    created_at: datetime
    description: str = ""
    requirements: str | None = None
    company_name: str | None = None
    location: str | None = None
    country: str | None = None
    work_mode: str = ""
    experience_level: str = ""
    job_type: str = ""
    salary_min: float | None = None
    salary_max: float | None = None
    salary_currency: str | None = None
    is_salary_visible: bool = False
    skills: tuple[str, ...] = ()
    servicenow_versions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CandidateSearchDocument:
    """Search projection of a candidate profile plus its embedding."""

    id: str
    full_name: str
    embedding: list[float]
    updated_at: datetime
    headline: str | None = None
    summary: str | None = None
    current_role: str | None = None
    location: str | None = None
    country: str | None = None
    years_of_experience: int = 0
    experience_level: str = ""
    availability: str = ""
    open_to_remote: bool = False
    skills: tuple[str, ...] = ()
    certifications: tuple[str, ...] = ()
    servicenow_versions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ScoredDocument:
    """A nearest-neighbour hit from the vector index.

    Attributes:
        id: Job id or candidate user id.
        score: Cosine similarity to the query vector.
    """

    id: str
    score: float
