"""
Upload queue for completed log pages.

Page writers call ``queue_file_upload`` when a page is complete. The call
only enqueues; the transfer happens on background worker threads, so a
writer never waits on the remote store.
"""

import queue
import threading
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

from pagedlog.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UploadRequest:
    """
    A completed file waiting for upload.

    Attributes:
        timeline_id: Owning timeline
        record_id: Owning timeline record
        log_type: Category of the file in the remote store
        name: Kind of log within that category
        path: Local file to upload
        delete_source: Whether the file is removed once uploaded
    """
    timeline_id: uuid.UUID
    record_id: uuid.UUID
    log_type: str
    name: str
    path: Path
    delete_source: bool


class UploadQueue(Protocol):
    """Receives completed files. Must return without waiting for the transfer."""

    def queue_file_upload(
        self,
        timeline_id: uuid.UUID,
        record_id: uuid.UUID,
        log_type: str,
        name: str,
        path: Path,
        delete_source: bool,
    ) -> None:
        ...


class Uploader(Protocol):
    """Transfers one file to the remote log store."""

    def upload(self, request: UploadRequest) -> Optional[Path]:
        ...


class RecordingUploadQueue:
    """
    Upload queue that only records requests, in arrival order.

    Nothing is transferred and no file is deleted.
    """

    def __init__(self):
        self.requests: List[UploadRequest] = []
        self._lock = threading.Lock()

    def queue_file_upload(
        self,
        timeline_id: uuid.UUID,
        record_id: uuid.UUID,
        log_type: str,
        name: str,
        path: Path,
        delete_source: bool,
    ) -> None:
        request = UploadRequest(
            timeline_id=timeline_id,
            record_id=record_id,
            log_type=log_type,
            name=name,
            path=Path(path),
            delete_source=delete_source,
        )
        with self._lock:
            self.requests.append(request)

    @property
    def paths(self) -> List[Path]:
        with self._lock:
            return [request.path for request in self.requests]


_STOP = object()


class FileUploadQueue:
    """
    Background upload queue.

    Requests are handed to ``uploader`` by daemon worker threads. A failed
    upload is logged and counted; retrying is up to the uploader.

    Example:
        upload_queue = FileUploadQueue(DirectoryUploader(target_dir))
        upload_queue.start()
        ...
        upload_queue.close()
    """

    def __init__(self, uploader: Uploader, worker_count: int = 1):
        """
        Initialize the queue. Workers start with start().

        Args:
            uploader: Performs the actual transfer
            worker_count: Number of worker threads

        Raises:
            ValueError: If worker_count is below 1
        """
        if worker_count < 1:
            raise ValueError(f"Worker count must be at least 1, got {worker_count}")

        self._uploader = uploader
        self._worker_count = worker_count
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._workers: List[threading.Thread] = []
        self._closed = False
        self._close_lock = threading.Lock()

        self._stats_lock = threading.Lock()
        self._queued = 0
        self._uploaded = 0
        self._failed = 0

    def start(self) -> None:
        """Start the worker threads."""
        if self._workers:
            return

        for i in range(self._worker_count):
            worker = threading.Thread(
                target=self._worker_loop,
                name=f"upload-worker-{i}",
                daemon=True,
            )
            self._workers.append(worker)
            worker.start()

        logger.info("Started upload queue", workers=self._worker_count)

    def queue_file_upload(
        self,
        timeline_id: uuid.UUID,
        record_id: uuid.UUID,
        log_type: str,
        name: str,
        path: Path,
        delete_source: bool,
    ) -> None:
        """
        Enqueue a completed file and return immediately.

        Raises:
            RuntimeError: If the queue is closed
        """
        request = UploadRequest(
            timeline_id=timeline_id,
            record_id=record_id,
            log_type=log_type,
            name=name,
            path=Path(path),
            delete_source=delete_source,
        )

        # close() cannot slip in between the check and the put
        with self._close_lock:
            if self._closed:
                raise RuntimeError("Upload queue is closed")

            with self._stats_lock:
                self._queued += 1
            self._queue.put(request)

        logger.debug("Queued file upload", path=str(request.path), log_type=log_type)

    def _worker_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._process(item)
            finally:
                self._queue.task_done()

    def _process(self, request: UploadRequest) -> None:
        try:
            destination = self._uploader.upload(request)
        except Exception as e:
            with self._stats_lock:
                self._failed += 1
            logger.error(
                "File upload failed",
                path=str(request.path),
                timeline_id=str(request.timeline_id),
                record_id=str(request.record_id),
                error=str(e),
            )
            return

        with self._stats_lock:
            self._uploaded += 1

        if request.delete_source:
            try:
                request.path.unlink()
            except FileNotFoundError:
                logger.warning("Uploaded file already removed", path=str(request.path))

        logger.info(
            "Uploaded file",
            path=str(request.path),
            destination=str(destination) if destination else None,
        )

    def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every queued request to be processed.

        Args:
            timeout: Max seconds to wait (None = wait forever)

        Returns:
            True if the queue drained in time
        """
        if timeout is None:
            self._queue.join()
            return True

        deadline = time.monotonic() + timeout
        with self._queue.all_tasks_done:
            while self._queue.unfinished_tasks:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._queue.all_tasks_done.wait(remaining)
        return True

    def close(self, timeout: Optional[float] = 30.0) -> None:
        """
        Stop accepting requests, drain the queue and stop the workers.

        Args:
            timeout: Max seconds to wait for pending uploads
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        if not self._workers:
            self.start()

        if not self.drain(timeout):
            logger.warning("Upload queue did not drain before close", pending=self._queue.qsize())

        for _ in self._workers:
            self._queue.put(_STOP)
        for worker in self._workers:
            worker.join(timeout)

        logger.info("Closed upload queue", **self.metrics())

    def metrics(self) -> dict:
        """
        Get queue metrics.

        Returns:
            Dictionary with metrics
        """
        with self._stats_lock:
            return {
                "queued": self._queued,
                "uploaded": self._uploaded,
                "failed": self._failed,
                "pending": self._queued - self._uploaded - self._failed,
            }

    def __enter__(self) -> "FileUploadQueue":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
