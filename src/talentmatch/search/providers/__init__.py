"""Embedding providers — protocol and implementations."""

from talentmatch.search.protocols import EmbeddingProvider
from talentmatch.search.providers.hashing import HashEmbedding

__all__ = [
    "EmbeddingProvider",
    "HashEmbedding",
]

# Optional providers — import-guarded, available only when deps are installed.
try:
    from talentmatch.search.providers.openai import OpenAIEmbedding

    __all__.append("OpenAIEmbedding")
except ImportError:  # pragma: no cover
    pass

try:
    from talentmatch.search.providers.sentence_transformers import SentenceTransformerEmbedding

    __all__.append("SentenceTransformerEmbedding")
except ImportError:  # pragma: no cover
    pass
