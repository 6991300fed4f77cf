"""Vector search layer — document index, stores, embedding providers."""

from talentmatch.search._index import DocumentVectorIndex
from talentmatch.search.protocols import EmbeddingProvider, VectorIndex, VectorStore
from talentmatch.search.providers.hashing import HashEmbedding
from talentmatch.search.stores.local import LocalVectorStore
from talentmatch.search.stores.memory import MemoryVectorStore
from talentmatch.search.types import (
    CandidateSearchDocument,
    JobSearchDocument,
    ScoredDocument,
)

__all__ = [
    "CandidateSearchDocument",
    "DocumentVectorIndex",
    "EmbeddingProvider",
    "HashEmbedding",
    "JobSearchDocument",
    "LocalVectorStore",
    "MemoryVectorStore",
    "ScoredDocument",
    "VectorIndex",
    "VectorStore",
]
