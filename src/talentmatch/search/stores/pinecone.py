"""PineconeVectorStore — Pinecone vector database backend."""

from __future__ import annotations

import logging
import os
from typing import Any

from talentmatch.search.types import DeleteResult, UpsertResult, VectorEntry, VectorSearchResult

try:
    from pinecone import PineconeAsyncio, ServerlessSpec

    _HAS_PINECONE = True
except ImportError:  # pragma: no cover
    PineconeAsyncio = None  # type: ignore[assignment,misc]
    ServerlessSpec = None  # type: ignore[assignment,misc]
    _HAS_PINECONE = False

logger = logging.getLogger(__name__)

_UPSERT_BATCH_SIZE = 1000


class PineconeVectorStore:
    """Pinecone-backed ``VectorStore``, one Pinecone index per store.

    When *dimension* is given, :meth:`connect` creates the index (cosine,
    serverless) if it does not exist yet.

    Usage::

        store = PineconeVectorStore(index_name="talentmatch-jobs", dimension=1536)
        await store.connect()
        await store.upsert([VectorEntry(id="a", vector=[0.1, ...], metadata={})])
        results = await store.search([0.1, ...], k=5)
        await store.close()
    """

    def __init__(
        self,
        *,
        index_name: str,
        api_key: str | None = None,
        namespace: str = "",
        dimension: int | None = None,
        cloud: str = "aws",
        region: str = "us-east-1",
    ) -> None:
        if not _HAS_PINECONE:
            msg = (
                "pinecone is required for PineconeVectorStore. "
                "Install it with: pip install talentmatch[pinecone]"
            )
            raise ImportError(msg)

        self._index_name = index_name
        self._api_key = api_key or os.environ.get("PINECONE_API_KEY", "")
        self._namespace = namespace
        self._dimension = dimension
        self._cloud = cloud
        self._region = region
        self._client: Any = None
        self._index: Any = None

    # ------------------------------------------------------------------
    # VectorStore protocol
    # ------------------------------------------------------------------

    async def upsert(self, entries: list[VectorEntry]) -> UpsertResult:
        """Batch upsert vectors. Chunks at 1000 vectors per API call."""
        idx = self._require_index()

        total = 0
        for i in range(0, len(entries), _UPSERT_BATCH_SIZE):
            batch = entries[i : i + _UPSERT_BATCH_SIZE]
            vectors = [{"id": e.id, "values": e.vector, "metadata": e.metadata} for e in batch]
            resp = await idx.upsert(vectors=vectors, namespace=self._namespace)
            total += getattr(resp, "upserted_count", len(batch))

        return UpsertResult(upserted_count=total)

    async def search(
        self,
        vector: list[float],
        *,
        k: int = 10,
        include_metadata: bool = True,
        score_threshold: float | None = None,
    ) -> list[VectorSearchResult]:
        """Query the index for nearest vectors."""
        idx = self._require_index()
        resp = await idx.query(
            vector=vector,
            top_k=k,
            namespace=self._namespace,
            include_metadata=include_metadata,
            include_values=False,
        )

        results: list[VectorSearchResult] = []
        for match in resp.matches:
            score = match.score
            if score_threshold is not None and score < score_threshold:
                continue
            results.append(
                VectorSearchResult(
                    id=match.id,
                    score=score,
                    metadata=dict(match.metadata) if match.metadata else {},
                )
            )
        return results

    async def delete(self, ids: list[str]) -> DeleteResult:
        """Delete vectors by their IDs."""
        idx = self._require_index()
        await idx.delete(ids=ids, namespace=self._namespace)
        # Pinecone delete is fire-and-forget; actual count unknown
        return DeleteResult(deleted_count=len(ids))

    async def fetch(self, ids: list[str]) -> list[VectorEntry | None]:
        """Fetch vectors by their IDs."""
        idx = self._require_index()
        resp = await idx.fetch(ids=ids, namespace=self._namespace)

        vectors_map = resp.vectors if resp.vectors else {}
        results: list[VectorEntry | None] = []
        for entry_id in ids:
            vec = vectors_map.get(entry_id)
            if vec is None:
                results.append(None)
            else:
                results.append(
                    VectorEntry(
                        id=vec.id,
                        vector=list(vec.values) if vec.values else [],
                        metadata=dict(vec.metadata) if vec.metadata else {},
                    )
                )
        return results

    async def connect(self) -> None:
        """Initialize the Pinecone async client and get the index handle."""
        self._client = PineconeAsyncio(api_key=self._api_key)
        if self._dimension is not None and not await self._client.has_index(self._index_name):
            logger.info(
                "Creating Pinecone index %s (dimension=%d)", self._index_name, self._dimension
            )
            await self._client.create_index(
                name=self._index_name,
                dimension=self._dimension,
                metric="cosine",
                spec=ServerlessSpec(cloud=self._cloud, region=self._region),
            )
        desc = await self._client.describe_index(self._index_name)
        self._index = self._client.IndexAsyncio(host=desc.host)

    async def close(self) -> None:
        """Close the async client."""
        if self._index is not None:
            await self._index.close()
            self._index = None
        if self._client is not None:
            await self._client.close()
            self._client = None

    @property
    def index_name(self) -> str:
        """Return the index name."""
        return self._index_name

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_index(self) -> Any:
        """Return the index handle, raising if not connected."""
        if self._index is None:
            msg = "Not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._index
