"""Result types for the indexing pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from talentmatch.models.records import EmbeddingStatus

if TYPE_CHECKING:
    from datetime import datetime

    from talentmatch.models.records import DocumentType, EmbeddingRecordBase


@dataclass(frozen=True, slots=True)
class EmbeddingStatusSnapshot:
    """Point-in-time view of a document's indexing state.

    Attributes:
        document_id: Identifier of the job or candidate profile.
        document_type: Kind of document.
        status: Current indexing status.
        last_indexed_at: Time of the last successful index, if any.
        retry_count: Failed attempts since the last success.
    """

    document_id: str
    document_type: DocumentType
    status: EmbeddingStatus
    last_indexed_at: datetime | None
    retry_count: int

    @classmethod
    def from_record(cls, record: EmbeddingRecordBase) -> EmbeddingStatusSnapshot:
        return cls(
            document_id=record.document_id,
            document_type=record.document_type,
            status=record.status,
            last_indexed_at=record.last_indexed_at,
            retry_count=record.retry_count,
        )


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Outcome of one indexing attempt for a single document.

    Attributes:
        document_id: Identifier of the processed document.
        document_type: Kind of document.
        status: Status the record was left in, ``None`` if there was no record.
        skipped: True when nothing was done (no record, or claimed elsewhere).
        error: Failure message for failed attempts.
    """

    document_id: str
    document_type: DocumentType
    status: EmbeddingStatus | None
    skipped: bool = False
    error: str | None = None

    @property
    def indexed(self) -> bool:
        return not self.skipped and self.status is EmbeddingStatus.INDEXED


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Aggregate counts for one worker tick."""

    processed: int = 0
    indexed: int = 0
    failed: int = 0
    skipped: int = 0
