"""
Deduplicating batch persistence queue.

Buffers index records between the indexer and the vector backend. Records
are keyed by chunk id so re-indexing a chunk before it is flushed replaces
the pending payload. Flushes happen when the batch size is reached, on a
periodic background tick, or on demand.

Dependencies: asyncio, memo_index.boundary.vdb.vector_backend
System role: Write-behind buffer in front of the vector backend
"""

import asyncio
import logging

from memo_index.boundary.vdb.vector_backend import VectorBackend
from memo_index.models.index_record import IndexRecord
from memo_index.models.stats import QueueStats

logger = logging.getLogger(__name__)


class PersistQueue:
    """
    Insertion-ordered, last-write-wins queue of index records.

    A background worker task owns periodic flushing; every flush, whatever
    its trigger, runs under one asyncio.Lock so flushes never overlap.
    """

    def __init__(
        self,
        backend: VectorBackend,
        batch_size: int = 50,
        flush_interval: float = 30.0,
    ) -> None:
        """
        Initialize queue.

        Args:
            backend: Vector backend receiving flushed records
            batch_size: Queue size that triggers an automatic flush
            flush_interval: Seconds between background flush ticks
        """
        self._backend = backend
        self._batch_size = batch_size
        self._flush_interval = flush_interval
        self._entries: dict[str, IndexRecord] = {}

        self._flush_lock = asyncio.Lock()
        self._flush_requested = asyncio.Event()
        self._worker: asyncio.Task | None = None
        self._auto_flush_task: asyncio.Task | None = None

        self._total_flushed = 0
        self._flush_count = 0
        self._failed_flushes = 0

    def start(self) -> None:
        """
        Start the background flush worker.

        Must be called from a running event loop. Calling it twice is a no-op.
        """
        if self._worker is not None and not self._worker.done():
            return
        self._worker = asyncio.get_running_loop().create_task(self._run())
        logger.info(
            f"{__name__}:start - Flush worker started",
            extra={"flush_interval": self._flush_interval, "batch_size": self._batch_size},
        )

    def stop(self) -> None:
        """Cancel the background worker and any pending automatic flush. Idempotent."""
        if self._worker is not None:
            self._worker.cancel()
            self._worker = None
            logger.info(f"{__name__}:stop - Flush worker stopped")
        if self._auto_flush_task is not None:
            self._auto_flush_task.cancel()
            self._auto_flush_task = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def enqueue(self, record: IndexRecord) -> None:
        """
        Add or replace a record.

        Reaching the batch size requests an automatic flush; its failure is
        logged and counted but never raised here.

        Args:
            record: Record to persist
        """
        self._entries[record.chunk_id] = record
        if len(self._entries) >= self._batch_size:
            self._request_flush()

    def get_by_file_path(self, file_path: str) -> list[IndexRecord]:
        return [record for record in self._entries.values() if record.file_path == file_path]

    def remove_by_file_path(self, file_path: str) -> int:
        """
        Drop pending records of a document.

        Returns:
            int: Number of records removed
        """
        ids = [id for id, record in self._entries.items() if record.file_path == file_path]
        for id in ids:
            del self._entries[id]
        return len(ids)

    def get_all(self) -> list[IndexRecord]:
        return list(self._entries.values())

    def size(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> QueueStats:
        return QueueStats(
            pending=len(self._entries),
            total_flushed=self._total_flushed,
            flush_count=self._flush_count,
            failed_flushes=self._failed_flushes,
            is_running=self.is_running,
        )

    async def flush(self, file_path: str | None = None) -> int:
        """
        Write pending records to the backend.

        Snapshots the queue (optionally only one document's records), upserts
        each record, asks the backend to persist once, then removes the
        flushed records. A record replaced while the flush was in progress
        stays queued for the next flush.

        Args:
            file_path: Restrict the flush to this document

        Returns:
            int: Number of records written

        Raises:
            VectorStoreError: When the backend rejects a record; nothing is removed
        """
        async with self._flush_lock:
            snapshot = [
                record
                for record in self._entries.values()
                if file_path is None or record.file_path == file_path
            ]
            if not snapshot:
                return 0

            logger.info(
                f"{__name__}:flush - START",
                extra={"records": len(snapshot), "file_path": file_path},
            )
            try:
                for record in snapshot:
                    await self._backend.upsert_multi_vector(record)
                await self._backend.persist()
            except Exception as e:
                self._failed_flushes += 1
                logger.error(
                    f"{__name__}:flush - FAILED {type(e).__name__}: {e}",
                    extra={"records": len(snapshot), "failed_flushes": self._failed_flushes},
                )
                raise

            self._total_flushed += len(snapshot)
            self._flush_count += 1
            for record in snapshot:
                if self._entries.get(record.chunk_id) is record:
                    del self._entries[record.chunk_id]

            logger.info(
                f"{__name__}:flush - SUCCESS",
                extra={"records": len(snapshot), "pending": len(self._entries)},
            )
            return len(snapshot)

    def _request_flush(self) -> None:
        if self.is_running:
            self._flush_requested.set()
            return
        if self._auto_flush_task is not None and not self._auto_flush_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"{__name__}:enqueue - No running event loop, flush deferred")
            return
        self._auto_flush_task = loop.create_task(self._flush_logged("batch"))

    async def _flush_logged(self, trigger: str) -> None:
        try:
            await self.flush()
        except Exception as e:
            logger.error(
                f"{__name__}:_flush_logged - {trigger} flush failed: {type(e).__name__}: {e}"
            )

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.wait_for(self._flush_requested.wait(), timeout=self._flush_interval)
                trigger = "batch"
            except asyncio.TimeoutError:
                trigger = "interval"
            self._flush_requested.clear()
            if self._entries:
                await self._flush_logged(trigger)
