"""
Paged log writer.

Accumulates the log lines of one unit of work into fixed-size page files
and hands every completed page to an upload queue.

Each writer owns a log identity (a fresh UUID) that prefixes all of its
page file names, so any number of writers can share one pages directory.
Pages are created lazily on the first write and rolled over once their
byte count reaches the page size; the line that crosses the threshold is
always kept whole on the page it crossed.
"""

import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from pagedlog.core.pages.format import format_line
from pagedlog.core.pages.page import Page
from pagedlog.upload.queue import UploadQueue
from pagedlog.utils.logging import bind_log_context, get_logger

logger = get_logger(__name__)

PAGING_FOLDER = "pages"

# 8 MiB
PAGE_SIZE = 8 * 1024 * 1024

LOG_TYPE = "DistributedTask.Core.Log"
LOG_NAME = "CustomToolLog"


class PagedLogError(Exception):
    """Base class for paged log errors."""
    pass


class PageWriterStateError(PagedLogError, RuntimeError):
    """Raised when a writer is used out of order."""
    pass


class PageWriterNotSetupError(PageWriterStateError):
    """Raised when a writer is used before setup()."""
    pass


class PageWriterClosedError(PageWriterStateError):
    """Raised when a writer is written to after end()."""
    pass


class WriterState(Enum):
    """Lifecycle of a page writer."""

    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PageWriter:
    """
    Writes one log as a series of pages.

    Usage:
        writer = PageWriter(pages_dir, upload_queue)
        writer.setup(timeline_id, record_id)
        writer.write("Step started")
        writer.end()

    All public methods hold an internal lock, so rotation never interleaves
    with a concurrent write. ``log_id`` is bound to the logging context for
    the duration of ``write`` and ``end``, so page-level events carry it too.

    Attributes:
        log_id: Unique identity of this log; prefix of every page file
        pages_dir: Directory the pages are created in
        page_size: Byte count at which the current page is rolled over
    """

    def __init__(
        self,
        pages_dir: Path,
        upload_queue: UploadQueue,
        page_size: int = PAGE_SIZE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize a page writer. No file is created until the first write.

        Args:
            pages_dir: Existing directory to store pages in
            upload_queue: Receives a notification for every completed page
            page_size: Rollover threshold in bytes
            clock: Returns the timestamp for each line (default: UTC now)

        Raises:
            ValueError: If page_size is not positive
        """
        if page_size <= 0:
            raise ValueError(f"Page size must be positive, got {page_size}")

        self.log_id = str(uuid.uuid4())
        self.pages_dir = Path(pages_dir)
        self.page_size = page_size

        self._upload_queue = upload_queue
        self._clock = clock or _utc_now

        self._timeline_id: Optional[uuid.UUID] = None
        self._record_id: Optional[uuid.UUID] = None
        self._courtesy_debug_logging = False
        self._is_setup = False

        self._state = WriterState.UNOPENED
        self._page: Optional[Page] = None
        self._sequence = 0
        self._lines_written = 0
        self._completed: List[Path] = []

        self._write_lock = threading.RLock()

    def setup(
        self,
        timeline_id: uuid.UUID,
        record_id: uuid.UUID,
        courtesy_debug_logging: bool = False,
    ) -> None:
        """
        Bind the timeline record this log belongs to.

        Args:
            timeline_id: Owning timeline
            record_id: Owning timeline record
            courtesy_debug_logging: Also mirror debug messages to the process log

        Raises:
            PageWriterStateError: If setup was already called
        """
        with self._write_lock:
            if self._is_setup:
                raise PageWriterStateError(f"Page writer {self.log_id} is already set up")

            self._timeline_id = timeline_id
            self._record_id = record_id
            self._courtesy_debug_logging = courtesy_debug_logging
            self._is_setup = True

        logger.info(
            "Set up page writer",
            log_id=self.log_id,
            timeline_id=str(timeline_id),
            record_id=str(record_id),
            courtesy_debug_logging=courtesy_debug_logging,
        )

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def courtesy_debug_logging(self) -> bool:
        return self._courtesy_debug_logging

    @property
    def page_paths(self) -> List[Path]:
        """Every page produced so far, in sequence order, open page last."""
        paths = list(self._completed)
        if self._page is not None:
            paths.append(self._page.path)
        return paths

    def write(self, message: str, is_debug_message: bool = False) -> None:
        """
        Append one line to the log.

        The first call creates page 1. If the line brings the page to the
        page size, the page is completed and the next one opened.

        Args:
            message: Free-text message; written after a UTC timestamp
            is_debug_message: Whether the message is debug output

        Raises:
            PageWriterNotSetupError: If setup() was not called
            PageWriterClosedError: If end() was already called
            OSError: If a page cannot be created, written or flushed
        """
        with self._write_lock, bind_log_context(log_id=self.log_id):
            self._ensure_writable()

            if self._page is None or self._page.closed:
                self._new_page()

            line = format_line(message, self._clock())
            self._page.write_line(line)
            self._lines_written += 1

            if is_debug_message and self._courtesy_debug_logging:
                logger.debug("Courtesy debug log", log_id=self.log_id, message=message)

            if self._page.is_full(self.page_size):
                logger.info(
                    "Rotation triggered by size",
                    log_id=self.log_id,
                    sequence=self._sequence,
                    byte_count=self._page.byte_count,
                    page_size=self.page_size,
                )
                self._new_page()

    def end(self) -> None:
        """
        Complete the open page, if any, and stop accepting writes.

        Calling end() again is a no-op.

        Raises:
            PageWriterNotSetupError: If setup() was not called
            OSError: If the page cannot be flushed or closed
        """
        with self._write_lock, bind_log_context(log_id=self.log_id):
            if not self._is_setup:
                raise PageWriterNotSetupError(
                    f"Page writer {self.log_id} must be set up before end()"
                )

            if self._state is WriterState.CLOSED:
                return

            self._end_page()
            self._state = WriterState.CLOSED

        logger.info(
            "Ended page writer",
            log_id=self.log_id,
            pages=len(self._completed),
            lines=self._lines_written,
        )

    def _ensure_writable(self) -> None:
        if not self._is_setup:
            raise PageWriterNotSetupError(
                f"Page writer {self.log_id} must be set up before write()"
            )
        if self._state is WriterState.CLOSED:
            raise PageWriterClosedError(f"Page writer {self.log_id} has ended")

    def _new_page(self) -> None:
        """Complete the current page and open the next one."""
        self._end_page()

        # the sequence only advances once the file exists, keeping it contiguous
        sequence = self._sequence + 1
        self._page = Page(self.pages_dir, self.log_id, sequence)
        self._sequence = sequence
        self._state = WriterState.OPEN

        logger.info(
            "Created new page",
            log_id=self.log_id,
            sequence=sequence,
            path=str(self._page.path),
        )

    def _end_page(self) -> None:
        """Flush and close the current page, then queue it for upload."""
        if self._page is None:
            return

        page = self._page
        page.close()

        # a page stays current until the hand-off succeeds, so end() can retry it
        self._upload_queue.queue_file_upload(
            timeline_id=self._timeline_id,
            record_id=self._record_id,
            log_type=LOG_TYPE,
            name=LOG_NAME,
            path=page.path,
            delete_source=True,
        )
        self._page = None
        self._completed.append(page.path)

        logger.info(
            "Completed page",
            log_id=self.log_id,
            sequence=page.sequence,
            byte_count=page.byte_count,
            path=str(page.path),
        )

    def metrics(self) -> dict:
        """
        Get writer metrics.

        Returns:
            Dictionary with metrics
        """
        with self._write_lock:
            return {
                "log_id": self.log_id,
                "state": self._state.value,
                "pages_completed": len(self._completed),
                "current_sequence": self._sequence,
                "current_byte_count": self._page.byte_count if self._page else 0,
                "lines_written": self._lines_written,
            }

    def __enter__(self) -> "PageWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.end()

    def __repr__(self) -> str:
        return (
            f"PageWriter(log_id={self.log_id!r}, state={self._state.value}, "
            f"sequence={self._sequence})"
        )


class PagingContext:
    """
    Shared settings for every page writer of a process.

    Owns the single pages directory under the diagnostics directory and the
    upload queue that completed pages are handed to.

    Attributes:
        pages_dir: ``<diag_dir>/pages``
        page_size: Page size given to new writers
    """

    def __init__(
        self,
        diag_dir: Path,
        upload_queue: UploadQueue,
        page_size: int = PAGE_SIZE,
    ):
        """
        Initialize the context and create the pages directory.

        Args:
            diag_dir: Diagnostics directory
            upload_queue: Upload queue shared by all writers
            page_size: Rollover threshold for new writers
        """
        self.pages_dir = Path(diag_dir) / PAGING_FOLDER
        self.page_size = page_size
        self.upload_queue = upload_queue

        self.pages_dir.mkdir(parents=True, exist_ok=True)

        logger.info(
            "Initialized paging context",
            pages_dir=str(self.pages_dir),
            page_size=page_size,
        )

    @classmethod
    def from_config(cls, config, upload_queue: UploadQueue) -> "PagingContext":
        """
        Build a context from ``pages.*`` configuration.

        Args:
            config: Config instance
            upload_queue: Upload queue shared by all writers
        """
        return cls(
            diag_dir=Path(config.get("pages.diag_dir")),
            upload_queue=upload_queue,
            page_size=int(config.get("pages.page_size", PAGE_SIZE)),
        )

    def create_writer(self, clock: Optional[Callable[[], datetime]] = None) -> PageWriter:
        """Create a writer that pages into this context's directory."""
        return PageWriter(
            pages_dir=self.pages_dir,
            upload_queue=self.upload_queue,
            page_size=self.page_size,
            clock=clock,
        )
