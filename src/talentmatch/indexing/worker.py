"""IndexingWorker — timer-driven loop that drains the pending queue."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

from talentmatch.indexing.types import BatchResult
from talentmatch.models.records import EmbeddingStatus

if TYPE_CHECKING:
    from talentmatch.indexing.processor import DocumentProcessor
    from talentmatch.indexing.store import EmbeddingRecordStore
    from talentmatch.indexing.types import ProcessResult
    from talentmatch.models.records import DocumentType

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL: float = 15.0
DEFAULT_BATCH_SIZE: int = 10
STALE_POLL_FACTOR: int = 4


def default_worker_id() -> str:
    """``<hostname>-<random>``, unique per process."""
    return f"{socket.gethostname()}-{uuid.uuid4().hex[:8]}"


def stale_window(poll_interval: float, stale_after: float | None = None) -> timedelta:
    """Age after which a Processing claim counts as abandoned."""
    seconds = stale_after if stale_after is not None else poll_interval * STALE_POLL_FACTOR
    return timedelta(seconds=seconds)


class IndexingWorker:
    """Polls the record store and processes eligible records concurrently.

    Each tick fetches up to *batch_size* eligible records and runs them all
    at once, at most *max_concurrency* in flight, then waits for every one
    to finish before sleeping.  A failing record never cancels its
    siblings, and a failing tick never ends the loop.

    Stopping is cooperative: :meth:`stop` is honoured between ticks and
    during the sleep, and an in-flight batch always runs to completion.
    """

    def __init__(
        self,
        store: EmbeddingRecordStore,
        processor: DocumentProcessor,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_concurrency: int | None = None,
        stale_after: float | None = None,
    ) -> None:
        if poll_interval <= 0:
            msg = f"poll_interval must be positive, got {poll_interval}"
            raise ValueError(msg)
        if batch_size <= 0:
            msg = f"batch_size must be positive, got {batch_size}"
            raise ValueError(msg)
        if max_concurrency is not None and max_concurrency <= 0:
            msg = f"max_concurrency must be positive, got {max_concurrency}"
            raise ValueError(msg)

        self._store = store
        self._processor = processor
        self._poll_interval = poll_interval
        self._batch_size = batch_size
        self._max_concurrency = max_concurrency or batch_size
        self._stale_after = stale_window(poll_interval, stale_after)
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._ticks = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def stale_after(self) -> timedelta:
        return self._stale_after

    @property
    def ticks(self) -> int:
        """Number of completed ticks since construction."""
        return self._ticks

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run_once(self) -> BatchResult:
        """Run a single tick: fetch one batch and process it."""
        records = await self._store.get_pending(self._batch_size, stale_after=self._stale_after)
        if not records:
            return BatchResult()

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _run(document_id: str, document_type: DocumentType) -> ProcessResult:
            async with semaphore:
                return await self._processor.process(document_id, document_type)

        outcomes = await asyncio.gather(
            *(_run(r.document_id, r.document_type) for r in records),
            return_exceptions=True,
        )

        indexed = failed = skipped = 0
        for record, outcome in zip(records, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Unhandled error processing %s %s",
                    record.document_type.value,
                    record.document_id,
                    exc_info=outcome,
                )
                failed += 1
            elif outcome.skipped:
                skipped += 1
            elif outcome.status is EmbeddingStatus.INDEXED:
                indexed += 1
            else:
                failed += 1

        result = BatchResult(
            processed=len(records), indexed=indexed, failed=failed, skipped=skipped
        )
        logger.info(
            "Indexing batch done: %d processed, %d indexed, %d failed, %d skipped",
            result.processed,
            result.indexed,
            result.failed,
            result.skipped,
        )
        return result

    async def run(self) -> None:
        """Tick until :meth:`stop` is called."""
        logger.info(
            "Indexing worker started (interval=%ss, batch=%d)",
            self._poll_interval,
            self._batch_size,
        )
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.error("Indexing tick failed", exc_info=True)
            self._ticks += 1

            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._poll_interval)
        logger.info("Indexing worker stopped")

    def start(self) -> asyncio.Task[None]:
        """Launch :meth:`run` as a background task on the running loop."""
        if self.running:
            msg = "Indexing worker is already running"
            raise RuntimeError(msg)
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run(), name="talentmatch-indexing-worker")
        return self._task

    async def stop(self) -> None:
        """Signal the loop to stop and wait for the current tick to finish."""
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
