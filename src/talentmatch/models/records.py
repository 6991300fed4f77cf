"""EmbeddingRecord model — per-document indexing state.

Provides ``EmbeddingRecordBase`` (non-table base) and ``EmbeddingRecord``
(concrete table).  The record only tracks *state*; vectors and the
search projection live in the vector index.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_RETRIES: int = 3
"""Failed attempts after which a record is no longer retried automatically."""

ERROR_MESSAGE_MAX_LENGTH: int = 2000


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DocumentType(str, Enum):
    """Kind of document tracked by the indexing pipeline."""

    JOB = "Job"
    CANDIDATE_PROFILE = "CandidateProfile"


class EmbeddingStatus(str, Enum):
    """Indexing state of a single document."""

    PENDING = "Pending"
    PROCESSING = "Processing"
    INDEXED = "Indexed"
    FAILED = "Failed"


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class EmbeddingRecordBase(SQLModel):
    """Base fields for an embedding record. Subclass with ``table=True`` for a concrete table."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    document_id: str = Field(index=True)
    document_type: DocumentType
    status: EmbeddingStatus = Field(default=EmbeddingStatus.PENDING, index=True)
    retry_count: int = Field(default=0)
    error_message: str | None = Field(default=None, max_length=ERROR_MESSAGE_MAX_LENGTH)
    claimed_by: str | None = Field(default=None)
    last_indexed_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        index=True,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def can_retry(self) -> bool:
        """True while the record is still eligible for automatic retry."""
        return self.retry_count < MAX_RETRIES

    def mark_pending(self) -> None:
        """(Re-)enter the queue.  History fields are left untouched."""
        self.status = EmbeddingStatus.PENDING
        self.claimed_by = None
        self.updated_at = _utcnow()

    def mark_processing(self, owner: str | None = None) -> None:
        self.status = EmbeddingStatus.PROCESSING
        self.claimed_by = owner
        self.updated_at = _utcnow()

    def mark_indexed(self) -> None:
        now = _utcnow()
        self.status = EmbeddingStatus.INDEXED
        self.last_indexed_at = now
        self.retry_count = 0
        self.error_message = None
        self.claimed_by = None
        self.updated_at = now

    def mark_failed(self, error: str, *, exhausted: bool = False) -> None:
        """Record a failed attempt.

        With *exhausted* the retry budget is used up at once, so the record
        drops out of automatic retry (permanent failures such as a deleted
        source document).  The count saturates at ``MAX_RETRIES``, so a
        re-requested record that fails again stays at the cap.
        """
        self.status = EmbeddingStatus.FAILED
        self.error_message = error[:ERROR_MESSAGE_MAX_LENGTH]
        self.retry_count = MAX_RETRIES if exhausted else min(self.retry_count + 1, MAX_RETRIES)
        self.claimed_by = None
        self.updated_at = _utcnow()


class EmbeddingRecord(EmbeddingRecordBase, table=True):
    """Default embedding record table — ``talentmatch_embedding_records``."""

    __tablename__ = "talentmatch_embedding_records"
    __table_args__ = (
        UniqueConstraint("document_id", "document_type", name="uq_embedding_records_document"),
    )
