"""LocalVectorStore — in-process usearch HNSW vector store."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

import numpy as np
from usearch.index import Index

from talentmatch.search.types import DeleteResult, UpsertResult, VectorEntry, VectorSearchResult

_INDEX_FILE = "vectors.usearch"
_META_FILE = "vectors_meta.json"


class LocalVectorStore:
    """In-process vector store backed by a usearch HNSW index.

    Implements the ``VectorStore`` protocol for single-instance
    deployments.  Vectors and metadata can be persisted to a directory with
    :meth:`save` and restored with :meth:`load`; when *directory* is given,
    :meth:`connect` loads an existing snapshot and :meth:`close` writes one.

    Thread-safe via :class:`threading.Lock`.
    """

    def __init__(
        self,
        *,
        dimension: int,
        name: str = "local",
        directory: str | None = None,
    ) -> None:
        self._dimension = dimension
        self._index_name = name
        self._directory = directory

        self._index = Index(ndim=dimension, metric="cos", dtype="f32")
        self._lock = threading.Lock()
        self._next_key: int = 0

        # key → {"id", "vector", **metadata}
        self._key_to_meta: dict[int, dict[str, Any]] = {}
        self._id_to_key: dict[str, int] = {}

    # ------------------------------------------------------------------
    # VectorStore protocol
    # ------------------------------------------------------------------

    async def upsert(self, entries: list[VectorEntry]) -> UpsertResult:
        """Insert or update vector entries."""
        count = 0
        errors: list[str] = []
        for entry in entries:
            if len(entry.vector) != self._dimension:
                errors.append(
                    f"{entry.id}: expected {self._dimension} dimensions, got {len(entry.vector)}"
                )
                continue

            if entry.id in self._id_to_key:
                self._remove_by_id(entry.id)

            vector = np.asarray(entry.vector, dtype=np.float32)
            with self._lock:
                key = self._next_key
                self._next_key += 1
                self._index.add(key, vector)

            self._key_to_meta[key] = {
                "id": entry.id,
                "vector": list(entry.vector),
                **entry.metadata,
            }
            self._id_to_key[entry.id] = key
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
        """Search for the *k* nearest vectors."""
        if len(self) == 0 or k <= 0:
            return []

        query = np.asarray(vector, dtype=np.float32)
        with self._lock:
            matches = self._index.search(query, min(k, len(self)))

        results: list[VectorSearchResult] = []
        for match_key, distance in zip(
            matches.keys.tolist(), matches.distances.tolist(), strict=True
        ):
            meta = self._key_to_meta.get(int(match_key))
            if meta is None:
                continue

            score = 1.0 - float(distance)
            if score_threshold is not None and score < score_threshold:
                continue

            results.append(
                VectorSearchResult(
                    id=meta["id"],
                    score=score,
                    metadata=_user_meta(meta) if include_metadata else {},
                )
            )

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:k]

    async def delete(self, ids: list[str]) -> DeleteResult:
        """Delete vectors by their IDs."""
        count = sum(1 for entry_id in ids if self._remove_by_id(entry_id))
        return DeleteResult(deleted_count=count)

    async def fetch(self, ids: list[str]) -> list[VectorEntry | None]:
        """Fetch vectors by their IDs."""
        results: list[VectorEntry | None] = []
        for entry_id in ids:
            key = self._id_to_key.get(entry_id)
            meta = self._key_to_meta.get(key) if key is not None else None
            if meta is None:
                results.append(None)
                continue
            results.append(
                VectorEntry(id=meta["id"], vector=list(meta["vector"]), metadata=_user_meta(meta))
            )
        return results

    async def connect(self) -> None:
        """Load the snapshot from the configured directory, if one exists."""
        if self._directory is not None and (Path(self._directory) / _META_FILE).exists():
            self.load(self._directory)

    async def close(self) -> None:
        """Write a snapshot to the configured directory, if any."""
        if self._directory is not None:
            self.save(self._directory)

    @property
    def index_name(self) -> str:
        """Return the index name."""
        return self._index_name

    def __len__(self) -> int:
        """Return the number of indexed entries."""
        return len(self._key_to_meta)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, directory: str) -> None:
        """Persist the index and metadata to *directory*."""
        dir_path = Path(directory)
        dir_path.mkdir(parents=True, exist_ok=True)

        with self._lock:
            self._index.save(str(dir_path / _INDEX_FILE))

        sidecar: dict[str, Any] = {
            "dimension": self._dimension,
            "next_key": self._next_key,
            "key_to_meta": {str(k): v for k, v in self._key_to_meta.items()},
        }
        with (dir_path / _META_FILE).open("w") as f:
            json.dump(sidecar, f)

    def load(self, directory: str) -> None:
        """Load a previously saved index from *directory*."""
        dir_path = Path(directory)

        with (dir_path / _META_FILE).open() as f:
            sidecar = json.load(f)

        if sidecar.get("dimension", self._dimension) != self._dimension:
            msg = (
                f"Snapshot in {directory} has dimension {sidecar['dimension']}, "
                f"store expects {self._dimension}"
            )
            raise ValueError(msg)

        with self._lock:
            self._index.load(str(dir_path / _INDEX_FILE))

        self._next_key = sidecar["next_key"]
        self._key_to_meta = {}
        self._id_to_key = {}
        for k_str, meta in sidecar.get("key_to_meta", {}).items():
            key = int(k_str)
            self._key_to_meta[key] = meta
            self._id_to_key[meta["id"]] = key

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _remove_by_id(self, entry_id: str) -> bool:
        """Remove a single entry by ID. Returns True if found."""
        key = self._id_to_key.pop(entry_id, None)
        if key is None:
            return False
        self._key_to_meta.pop(key, None)
        with self._lock:
            self._index.remove(key)
        return True


def _user_meta(meta: dict[str, Any]) -> dict[str, Any]:
    return {mk: mv for mk, mv in meta.items() if mk not in ("id", "vector")}
