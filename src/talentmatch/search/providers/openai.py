"""OpenAIEmbedding — document embeddings from the OpenAI Embeddings API."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

try:
    from openai import AsyncOpenAI

    _HAS_OPENAI = True
except ImportError:  # pragma: no cover
    _HAS_OPENAI = False

if TYPE_CHECKING:
    from openai import AsyncOpenAI as AsyncOpenAIType

logger = logging.getLogger(__name__)

_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

# Roughly 8K tokens; inputs past this are cut before the API call.
MAX_INPUT_CHARS = 32_000


def _truncate(text: str) -> str:
    if len(text) <= MAX_INPUT_CHARS:
        return text
    logger.debug("Truncating embedding input from %d chars", len(text))
    return text[:MAX_INPUT_CHARS]


class OpenAIEmbedding:
    """Embeds job and candidate text with an OpenAI embedding model.

    Every input is cut to :data:`MAX_INPUT_CHARS` characters, and each call
    is a single API request.  Set *base_url* to target an OpenAI-compatible
    gateway such as Azure OpenAI.

    Requires the ``openai`` package::

        pip install talentmatch[openai]
    """

    def __init__(
        self,
        *,
        model: str = "text-embedding-3-small",
        dimensions: int | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        max_retries: int = 2,
        timeout: float = 60.0,
    ) -> None:
        if not _HAS_OPENAI:
            msg = (
                "openai is required for OpenAIEmbedding. "
                "Install it with: pip install talentmatch[openai]"
            )
            raise ImportError(msg)

        key = api_key or os.environ.get("OPENAI_API_KEY")
        if not key:
            msg = "No OpenAI API key provided. Pass api_key= or set OPENAI_API_KEY."
            raise ValueError(msg)

        self._model = model
        self._dimensions = dimensions
        self._client: AsyncOpenAIType = AsyncOpenAI(
            api_key=key, base_url=base_url, max_retries=max_retries, timeout=timeout
        )

    async def embed(self, text: str) -> list[float]:
        [vector] = await self._create([text])
        return vector

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return await self._create(texts)

    @property
    def dimensions(self) -> int:
        if self._dimensions is not None:
            return self._dimensions
        try:
            return _MODEL_DIMENSIONS[self._model]
        except KeyError:
            msg = (
                f"Unknown default dimensions for model {self._model!r}. "
                "Pass dimensions= explicitly."
            )
            raise ValueError(msg) from None

    @property
    def model_name(self) -> str:
        return self._model

    async def close(self) -> None:
        await self._client.close()

    async def _create(self, texts: list[str]) -> list[list[float]]:
        request: dict[str, Any] = {
            "model": self._model,
            "input": [_truncate(t) for t in texts],
        }
        if self._dimensions is not None:
            request["dimensions"] = self._dimensions

        response = await self._client.embeddings.create(**request)
        # The API may return items out of input order.
        return [item.embedding for item in sorted(response.data, key=lambda e: e.index)]
