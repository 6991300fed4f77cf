"""DocumentVectorIndex — job/candidate vector index over two VectorStores."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import TYPE_CHECKING, Any

from talentmatch.models.records import DocumentType
from talentmatch.search.types import ScoredDocument, VectorEntry

if TYPE_CHECKING:
    from talentmatch.search.protocols import VectorStore
    from talentmatch.search.types import CandidateSearchDocument, JobSearchDocument

logger = logging.getLogger(__name__)


def _metadata(document: JobSearchDocument | CandidateSearchDocument) -> dict[str, Any]:
    """Flatten a search document into JSON-safe metadata (no embedding, no nulls)."""
    meta: dict[str, Any] = {}
    for key, value in asdict(document).items():
        if key in ("id", "embedding") or value is None:
            continue
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, tuple):
            value = list(value)
        meta[key] = value
    return meta


class DocumentVectorIndex:
    """Implements the ``VectorIndex`` protocol on top of one store per document type.

    Jobs and candidates live in separate stores so a nearest-neighbour query
    for one kind never returns the other.  Upserts write the full document
    projection in a single entry; a store that rejects the entry raises
    instead of leaving a partial write behind.
    """

    def __init__(self, job_store: VectorStore, candidate_store: VectorStore) -> None:
        self._stores: dict[DocumentType, VectorStore] = {
            DocumentType.JOB: job_store,
            DocumentType.CANDIDATE_PROFILE: candidate_store,
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert_job(self, document: JobSearchDocument) -> None:
        """Replace the indexed projection of a job."""
        await self._upsert(DocumentType.JOB, document)

    async def upsert_candidate(self, document: CandidateSearchDocument) -> None:
        """Replace the indexed projection of a candidate."""
        await self._upsert(DocumentType.CANDIDATE_PROFILE, document)

    async def delete(self, document_id: str, document_type: DocumentType) -> None:
        """Remove a document from the index.  Missing documents are ignored."""
        result = await self._stores[document_type].delete([document_id])
        logger.debug(
            "Deleted %s %s from vector index (%d removed)",
            document_type.value,
            document_id,
            result.deleted_count,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_vector(
        self, document_id: str, document_type: DocumentType
    ) -> list[float] | None:
        """Return the stored embedding for a document, or ``None``."""
        entries = await self._stores[document_type].fetch([document_id])
        entry = entries[0] if entries else None
        if entry is None or not entry.vector:
            return None
        return list(entry.vector)

    async def search_jobs_for_candidate(
        self, vector: list[float], top_k: int = 20
    ) -> list[ScoredDocument]:
        """Nearest jobs to a candidate embedding."""
        return await self._search(DocumentType.JOB, vector, top_k)

    async def search_candidates_for_job(
        self, vector: list[float], top_k: int = 20
    ) -> list[ScoredDocument]:
        """Nearest candidates to a job embedding."""
        return await self._search(DocumentType.CANDIDATE_PROFILE, vector, top_k)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Connect both underlying stores."""
        for store in self._stores.values():
            await store.connect()

    async def close(self) -> None:
        """Close both underlying stores."""
        for store in self._stores.values():
            await store.close()

    def store_for(self, document_type: DocumentType) -> VectorStore:
        """Return the store holding documents of *document_type*."""
        return self._stores[document_type]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _upsert(
        self,
        document_type: DocumentType,
        document: JobSearchDocument | CandidateSearchDocument,
    ) -> None:
        entry = VectorEntry(
            id=document.id,
            vector=list(document.embedding),
            metadata=_metadata(document),
        )
        result = await self._stores[document_type].upsert([entry])
        if result.errors or result.upserted_count != 1:
            detail = "; ".join(result.errors) or "store accepted no entries"
            msg = f"Failed to index {document_type.value} {document.id}: {detail}"
            raise RuntimeError(msg)

    async def _search(
        self, document_type: DocumentType, vector: list[float], top_k: int
    ) -> list[ScoredDocument]:
        if top_k <= 0:
            return []
        hits = await self._stores[document_type].search(vector, k=top_k, include_metadata=False)
        return [ScoredDocument(id=hit.id, score=hit.score) for hit in hits]
