"""MemoryVectorStore — exact cosine scan over a dict of numpy vectors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from talentmatch.search.types import DeleteResult, UpsertResult, VectorEntry, VectorSearchResult

if TYPE_CHECKING:
    from numpy.typing import NDArray


class MemoryVectorStore:
    """Brute-force in-memory ``VectorStore``.

    Every search scores all stored vectors, so results are exact and
    deterministic.  Intended for tests and small local datasets.
    """

    def __init__(self, *, dimension: int, name: str = "memory") -> None:
        self._dimension = dimension
        self._index_name = name
        self._vectors: dict[str, NDArray[np.float32]] = {}
        self._metadata: dict[str, dict[str, Any]] = {}

    async def upsert(self, entries: list[VectorEntry]) -> UpsertResult:
        count = 0
        errors: list[str] = []
        for entry in entries:
            if len(entry.vector) != self._dimension:
                errors.append(
                    f"{entry.id}: expected {self._dimension} dimensions, got {len(entry.vector)}"
                )
                continue
            self._vectors[entry.id] = np.asarray(entry.vector, dtype=np.float32)
            self._metadata[entry.id] = dict(entry.metadata)
            count += 1
        return UpsertResult(upserted_count=count, errors=errors)

    async def search(
        self,
        vector: list[float],
        *,
        k: int = 10,
        include_metadata: bool = True,
        score_threshold: float | None = None,
    ) -> list[VectorSearchResult]:
        if not self._vectors or k <= 0:
            return []

        ids = list(self._vectors)
        matrix = np.stack([self._vectors[i] for i in ids])
        query = np.asarray(vector, dtype=np.float32)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(norms > 0, matrix @ query / norms, 0.0)

        results = [
            VectorSearchResult(
                id=entry_id,
                score=float(score),
                metadata=dict(self._metadata[entry_id]) if include_metadata else {},
            )
            for entry_id, score in zip(ids, scores.tolist(), strict=True)
            if score_threshold is None or score >= score_threshold
        ]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:k]

    async def delete(self, ids: list[str]) -> DeleteResult:
        count = 0
        for entry_id in ids:
            if self._vectors.pop(entry_id, None) is not None:
                self._metadata.pop(entry_id, None)
                count += 1
        return DeleteResult(deleted_count=count)

    async def fetch(self, ids: list[str]) -> list[VectorEntry | None]:
        results: list[VectorEntry | None] = []
        for entry_id in ids:
            vector = self._vectors.get(entry_id)
            if vector is None:
                results.append(None)
                continue
            results.append(
                VectorEntry(
                    id=entry_id,
                    vector=vector.tolist(),
                    metadata=dict(self._metadata[entry_id]),
                )
            )
        return results

    async def connect(self) -> None:
        """No-op for the in-memory store."""

    async def close(self) -> None:
        """No-op for the in-memory store."""

    @property
    def index_name(self) -> str:
        return self._index_name

    def __len__(self) -> int:
        return len(self._vectors)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._vectors
