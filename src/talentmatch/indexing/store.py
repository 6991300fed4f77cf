"""EmbeddingRecordStore — async SQL persistence for embedding records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import and_, func, or_, update
from sqlmodel import select

from talentmatch.models.records import (
    MAX_RETRIES,
    EmbeddingRecord,
    EmbeddingRecordBase,
    EmbeddingStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

    from sqlalchemy.ext.asyncio import AsyncSession

    from talentmatch.models.records import DocumentType

logger = logging.getLogger(__name__)


class EmbeddingRecordStore:
    """Persistent table of per-document indexing state.

    Every operation opens its own session from *session_factory*, commits
    on success and rolls back on failure.  The store never deletes a
    record and provides no cross-instance locking of its own;
    :meth:`transition` is the compare-and-set primitive callers use to
    claim and finish records safely.
    """

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        record_model: type[EmbeddingRecordBase] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._model: type[EmbeddingRecordBase] = record_model or EmbeddingRecord  # type: ignore[assignment]

    @property
    def record_model(self) -> type[EmbeddingRecordBase]:
        return self._model

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_by_document(
        self, document_id: str, document_type: DocumentType
    ) -> EmbeddingRecordBase | None:
        """Return the record for ``(document_id, document_type)``, if any."""
        model = self._model
        async with self._session_factory() as session:
            result = await session.execute(
                select(model).where(
                    model.document_id == document_id,  # type: ignore[arg-type]
                    model.document_type == document_type,  # type: ignore[arg-type]
                )
            )
            return result.scalars().first()

    async def exists(self, document_id: str, document_type: DocumentType) -> bool:
        model = self._model
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(model).where(
                    model.document_id == document_id,  # type: ignore[arg-type]
                    model.document_type == document_type,  # type: ignore[arg-type]
                )
            )
            return (result.scalar_one() or 0) > 0

    async def get_pending(
        self,
        batch_size: int,
        *,
        stale_after: timedelta | None = None,
    ) -> list[EmbeddingRecordBase]:
        """Return up to *batch_size* records eligible for processing.

        Eligible records are Pending ones, Failed ones with retries left and,
        when *stale_after* is given, Processing ones whose claim is older
        than that.  Oldest ``updated_at`` first.
        """
        if batch_size <= 0:
            return []

        model = self._model
        conditions = [
            model.status == EmbeddingStatus.PENDING,  # type: ignore[arg-type]
            and_(
                model.status == EmbeddingStatus.FAILED,  # type: ignore[arg-type]
                model.retry_count < MAX_RETRIES,  # type: ignore[arg-type]
            ),
        ]
        if stale_after is not None:
            cutoff = datetime.now(UTC) - stale_after
            conditions.append(
                and_(
                    model.status == EmbeddingStatus.PROCESSING,  # type: ignore[arg-type]
                    model.retry_count < MAX_RETRIES,  # type: ignore[arg-type]
                    model.updated_at < cutoff,  # type: ignore[arg-type]
                )
            )

        async with self._session_factory() as session:
            result = await session.execute(
                select(model)
                .where(or_(*conditions))
                .order_by(
                    model.updated_at,  # type: ignore[arg-type]
                    model.created_at,  # type: ignore[arg-type]
                    model.id,  # type: ignore[arg-type]
                )
                .limit(batch_size)
            )
            return list(result.scalars().all())

    async def count_by_status(self) -> dict[EmbeddingStatus, int]:
        """Return the number of records in each status (zero-filled)."""
        model = self._model
        counts = {status: 0 for status in EmbeddingStatus}
        async with self._session_factory() as session:
            result = await session.execute(
                select(model.status, func.count()).group_by(model.status)  # type: ignore[arg-type]
            )
            for status, count in result.all():
                counts[EmbeddingStatus(status)] = count
        return counts

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, record: EmbeddingRecordBase) -> EmbeddingRecordBase:
        """Insert a new record.

        Raises ``sqlalchemy.exc.IntegrityError`` if a record for the same
        document already exists.
        """
        async with self._session_factory() as session:
            try:
                session.add(record)
                await session.commit()
            except Exception:
                logger.debug(
                    "Insert failed for %s %s", record.document_type, record.document_id,
                    exc_info=True,
                )
                await session.rollback()
                raise
        return record

    async def save(self, record: EmbeddingRecordBase) -> None:
        """Write the record's current state unconditionally."""
        async with self._session_factory() as session:
            try:
                await session.merge(record)
                await session.commit()
            except Exception as e:
                logger.error(
                    "Save failed for %s %s: %s", record.document_type, record.document_id, e,
                    exc_info=True,
                )
                await session.rollback()
                raise

    async def transition(
        self,
        record: EmbeddingRecordBase,
        *,
        expected_status: EmbeddingStatus,
        expected_updated_at: datetime,
    ) -> bool:
        """Write the record's state only if the stored row is unchanged.

        The stored row must still have *expected_status* and
        *expected_updated_at*.  Returns ``False`` (and writes nothing) when
        another writer got there first.
        """
        model = self._model
        stmt = (
            update(model)
            .where(
                model.id == record.id,  # type: ignore[arg-type]
                model.status == expected_status,  # type: ignore[arg-type]
                model.updated_at == expected_updated_at,  # type: ignore[arg-type]
            )
            .values(
                status=record.status,
                retry_count=record.retry_count,
                error_message=record.error_message,
                claimed_by=record.claimed_by,
                last_indexed_at=record.last_indexed_at,
                updated_at=record.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        async with self._session_factory() as session:
            try:
                result = await session.execute(stmt)
                await session.commit()
            except Exception as e:
                logger.error(
                    "Transition failed for %s %s: %s", record.document_type, record.document_id, e,
                    exc_info=True,
                )
                await session.rollback()
                raise
        return result.rowcount == 1  # type: ignore[attr-defined]
