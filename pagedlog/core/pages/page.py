"""
A single log page file.

A page is created exclusively, written as append-only UTF-8 text and
closed exactly once. It never reopens: once closed, the file belongs to
whoever was told about it.
"""

import errno
import os
from pathlib import Path
from typing import Optional, TextIO

from pagedlog.core.pages.format import ENCODING, encoded_size, page_file_name
from pagedlog.utils.logging import get_logger

logger = get_logger(__name__)


class DiskFullError(OSError):
    """Raised when the disk is full."""
    pass


def _raise_io_error(e: OSError, path: Path, action: str) -> None:
    logger.error(f"Failed to {action} page", path=str(path), error=str(e))
    if e.errno == errno.ENOSPC:
        raise DiskFullError(e.errno, f"Disk is full, cannot {action} page", str(path)) from e
    raise e


class Page:
    """
    Manages a single page file.

    Attributes:
        log_id: Log identity the page belongs to
        sequence: 1-based position of the page within its log
        path: Path to the page file
    """

    def __init__(self, directory: Path, log_id: str, sequence: int):
        """
        Create the page file.

        Args:
            directory: Existing directory to create the page in
            log_id: Log identity, used as the file name prefix
            sequence: Page sequence number

        Raises:
            FileExistsError: If a page with this name already exists
            DiskFullError: If the disk is full
            OSError: If the file cannot be created
        """
        self.log_id = log_id
        self.sequence = sequence
        self.path = Path(directory) / page_file_name(log_id, sequence)

        self._byte_count = 0
        self._lines_written = 0

        try:
            # "x" fails on an existing file rather than clobbering another writer's page
            self._file: Optional[TextIO] = open(self.path, "x", encoding=ENCODING)
        except OSError as e:
            _raise_io_error(e, self.path, "create")

        logger.debug("Created page", log_id=log_id, sequence=sequence, path=str(self.path))

    @property
    def byte_count(self) -> int:
        """UTF-8 bytes written, excluding line terminators."""
        return self._byte_count

    @property
    def lines_written(self) -> int:
        return self._lines_written

    @property
    def closed(self) -> bool:
        return self._file is None

    def write_line(self, line: str) -> int:
        """
        Append one line and its terminator.

        Args:
            line: Formatted line text without terminator

        Returns:
            Bytes counted for this line

        Raises:
            ValueError: If the page is closed
            OSError: If the write fails
        """
        if self._file is None:
            raise ValueError("Cannot write to closed page")

        try:
            self._file.write(line + "\n")
        except OSError as e:
            _raise_io_error(e, self.path, "write")

        size = encoded_size(line)
        self._byte_count += size
        self._lines_written += 1
        return size

    def is_full(self, page_size: int) -> bool:
        """
        Check whether the page has reached ``page_size``.

        Returns:
            True if the byte count is at or above page_size
        """
        return self._byte_count >= page_size

    def flush(self) -> None:
        """Flush buffered text and force it to physical storage."""
        if self._file is None:
            return

        try:
            self._file.flush()
            os.fsync(self._file.fileno())
        except OSError as e:
            _raise_io_error(e, self.path, "flush")

    def close(self) -> None:
        """Flush and release the file handle. Safe to call twice."""
        if self._file is None:
            return

        self.flush()

        handle, self._file = self._file, None
        try:
            handle.close()
        except OSError as e:
            _raise_io_error(e, self.path, "close")

        logger.debug(
            "Closed page",
            log_id=self.log_id,
            sequence=self.sequence,
            byte_count=self._byte_count,
            lines=self._lines_written,
        )

    def __enter__(self) -> "Page":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Page(log_id={self.log_id!r}, sequence={self.sequence}, "
            f"byte_count={self._byte_count}, closed={self.closed})"
        )
