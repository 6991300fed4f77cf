"""Vector stores — VectorStore protocol implementations."""

from talentmatch.search.stores.local import LocalVectorStore
from talentmatch.search.stores.memory import MemoryVectorStore

__all__ = [
    "LocalVectorStore",
    "MemoryVectorStore",
]

# Optional stores — import-guarded, available only when deps are installed.
try:
    from talentmatch.search.stores.pinecone import PineconeVectorStore

    __all__.append("PineconeVectorStore")
except ImportError:  # pragma: no cover
    pass
