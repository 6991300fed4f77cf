"""SQLModel database models for talentmatch."""

from talentmatch.models.records import (
    MAX_RETRIES,
    DocumentType,
    EmbeddingRecord,
    EmbeddingRecordBase,
    EmbeddingStatus,
)

__all__ = [
    "MAX_RETRIES",
    "DocumentType",
    "EmbeddingRecord",
    "EmbeddingRecordBase",
    "EmbeddingStatus",
]
