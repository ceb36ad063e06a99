"""
Page reader for reassembling a log from its page files.

Relies only on the file naming scheme: the pages of one log share a log
identity prefix and carry a contiguous sequence number starting at 1.
"""

from pathlib import Path
from typing import Iterator, List

from pagedlog.core.pages.format import (
    ENCODING,
    PAGE_FILE_SUFFIX,
    PageLine,
    parse_line,
    parse_page_file_name,
)
from pagedlog.core.pages.writer import PagedLogError
from pagedlog.utils.logging import get_logger

logger = get_logger(__name__)


class PageSequenceError(PagedLogError):
    """Raised when a log's pages are missing or out of sequence."""
    pass


def list_log_ids(pages_dir: Path) -> List[str]:
    """
    List the log identities that have pages in a directory.

    Args:
        pages_dir: Pages directory

    Returns:
        Sorted, distinct log identities
    """
    log_ids = set()
    for path in Path(pages_dir).glob(f"*{PAGE_FILE_SUFFIX}"):
        try:
            log_id, _ = parse_page_file_name(path.name)
        except ValueError:
            continue
        log_ids.add(log_id)
    return sorted(log_ids)


class PageReader:
    """
    Sequential reader over all pages of one log.

    Attributes:
        pages_dir: Directory containing the pages
        log_id: Log identity to read
    """

    def __init__(self, pages_dir: Path, log_id: str):
        self.pages_dir = Path(pages_dir)
        self.log_id = log_id

    def page_paths(self) -> List[Path]:
        """
        Find the log's pages in sequence order.

        Returns:
            Page paths, page 1 first

        Raises:
            PageSequenceError: If the sequence numbers are not 1..N
        """
        pages = []
        for path in self.pages_dir.glob(f"{self.log_id}_*{PAGE_FILE_SUFFIX}"):
            try:
                log_id, sequence = parse_page_file_name(path.name)
            except ValueError:
                continue
            if log_id == self.log_id:
                pages.append((sequence, path))

        pages.sort()
        sequences = [sequence for sequence, _ in pages]
        expected = list(range(1, len(pages) + 1))
        if sequences != expected:
            raise PageSequenceError(
                f"Pages of log {self.log_id} are not contiguous: {sequences}"
            )

        return [path for _, path in pages]

    def read_lines(self) -> Iterator[PageLine]:
        """
        Read every line of the log in write order.

        Yields:
            Parsed page lines

        Raises:
            PageSequenceError: If pages are missing
            ValueError: If a line is malformed
        """
        for path in self.page_paths():
            logger.debug("Reading page", log_id=self.log_id, path=str(path))
            with open(path, "r", encoding=ENCODING) as f:
                for line in f:
                    yield parse_line(line)

    def __repr__(self) -> str:
        return f"PageReader(pages_dir={str(self.pages_dir)!r}, log_id={self.log_id!r})"
