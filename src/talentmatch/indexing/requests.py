"""Request-Indexing — enqueue or reset a document for (re-)indexing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from talentmatch.exceptions import InvalidRequestError
from talentmatch.indexing.types import EmbeddingStatusSnapshot

if TYPE_CHECKING:
    from talentmatch.indexing.store import EmbeddingRecordStore
    from talentmatch.models.records import DocumentType

logger = logging.getLogger(__name__)


async def request_indexing(
    store: EmbeddingRecordStore,
    document_id: str,
    document_type: DocumentType,
) -> EmbeddingStatusSnapshot:
    """Create the document's record in Pending, or reset an existing one.

    Idempotent: calling it any number of times before the worker runs
    leaves exactly one Pending record.  Only the status (and its
    timestamp) changes on reset; retry count, last error and last index
    time are kept.  No embedding is computed here.
    """
    if not document_id or not str(document_id).strip():
        raise InvalidRequestError("document_id must not be empty")

    record = await store.get_by_document(document_id, document_type)
    if record is None:
        record = store.record_model(document_id=document_id, document_type=document_type)
        try:
            await store.add(record)
        except IntegrityError:
            # Lost an insert race; the row exists now.
            existing = await store.get_by_document(document_id, document_type)
            if existing is None:
                raise
            record = existing
            record.mark_pending()
            await store.save(record)
    else:
        record.mark_pending()
        await store.save(record)

    logger.info("Indexing requested for %s %s", document_type.value, document_id)
    return EmbeddingStatusSnapshot.from_record(record)
