"""HashEmbedding — deterministic pseudo-embeddings seeded from a text hash."""

from __future__ import annotations

import hashlib

import numpy as np


class HashEmbedding:
    """Deterministic embedding provider with no model behind it.

    Each text seeds a random generator from its SHA-256 digest and draws a
    unit-length Gaussian vector, so identical text always produces an
    identical vector and different texts are close to orthogonal.  Useful
    for tests and local development; similarity carries no meaning.
    """

    def __init__(self, dimensions: int = 384, *, model_name: str = "hash") -> None:
        if dimensions <= 0:
            msg = f"dimensions must be positive, got {dimensions}"
            raise ValueError(msg)
        self._dimensions = dimensions
        self._model_name = model_name

    def embed_sync(self, text: str) -> list[float]:
        """Embed *text* synchronously."""
        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "big")
        vector = np.random.default_rng(seed).standard_normal(self._dimensions)
        vector /= np.linalg.norm(vector)
        return vector.astype(np.float32).tolist()

    async def embed(self, text: str) -> list[float]:
        return self.embed_sync(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_sync(t) for t in texts]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return self._model_name
