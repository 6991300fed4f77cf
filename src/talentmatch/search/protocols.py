"""Search layer protocols — async-first interfaces for embedding and vector storage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from talentmatch.models.records import DocumentType
    from talentmatch.search.types import (
        CandidateSearchDocument,
        DeleteResult,
        JobSearchDocument,
        ScoredDocument,
        UpsertResult,
        VectorEntry,
        VectorSearchResult,
    )


# ------------------------------------------------------------------
# Core protocols
# ------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Async-first protocol for text-to-vector embedding.

    Implementations convert text into fixed-dimension float vectors
    suitable for cosine similarity search.  Failures (service down,
    quota exceeded) propagate as exceptions.
    """

    async def embed(self, text: str) -> list[float]:
        """Embed a single text string into a vector."""
        ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed multiple texts into vectors."""
        ...

    @property
    def dimensions(self) -> int:
        """Number of dimensions in the embedding vectors."""
        ...

    @property
    def model_name(self) -> str:
        """Name of the embedding model."""
        ...


@runtime_checkable
class VectorStore(Protocol):
    """Async-first protocol for a single collection of vectors."""

    async def upsert(self, entries: list[VectorEntry]) -> UpsertResult:
        """Insert or update vector entries."""
        ...

    async def search(
        self,
        vector: list[float],
        *,
        k: int = 10,
        include_metadata: bool = True,
        score_threshold: float | None = None,
    ) -> list[VectorSearchResult]:
        """Search for the *k* nearest vectors by cosine similarity."""
        ...

    async def delete(self, ids: list[str]) -> DeleteResult:
        """Delete vectors by their IDs.  Unknown IDs are ignored."""
        ...

    async def fetch(self, ids: list[str]) -> list[VectorEntry | None]:
        """Fetch vectors by their IDs.  Missing IDs return ``None``."""
        ...

    async def connect(self) -> None:
        """Open connection / initialize resources."""
        ...

    async def close(self) -> None:
        """Release connection / clean up resources."""
        ...

    @property
    def index_name(self) -> str:
        """Name of the underlying index."""
        ...


@runtime_checkable
class VectorIndex(Protocol):
    """Document-level vector index for jobs and candidates.

    Upserts replace the whole projection of a document.  Searches return
    hits ordered by descending cosine similarity.
    """

    async def upsert_job(self, document: JobSearchDocument) -> None: ...

    async def upsert_candidate(self, document: CandidateSearchDocument) -> None: ...

    async def delete(self, document_id: str, document_type: DocumentType) -> None: ...

    async def fetch_vector(
        self, document_id: str, document_type: DocumentType
    ) -> list[float] | None:
        """Return the stored embedding for a document, or ``None``."""
        ...

    async def search_jobs_for_candidate(
        self, vector: list[float], top_k: int = 20
    ) -> list[ScoredDocument]: ...

    async def search_candidates_for_job(
        self, vector: list[float], top_k: int = 20
    ) -> list[ScoredDocument]: ...
