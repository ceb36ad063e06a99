"""
Paged log storage.

This package provides the page writer with:
- Timestamped UTF-8 text lines
- Automatic page rotation at a byte threshold
- Exclusive page file creation
- Sequential reads across a log's pages
"""

from pagedlog.core.pages.format import PageLine, format_line, parse_line
from pagedlog.core.pages.page import DiskFullError, Page
from pagedlog.core.pages.reader import PageReader, PageSequenceError, list_log_ids
from pagedlog.core.pages.writer import (
    LOG_NAME,
    LOG_TYPE,
    PAGE_SIZE,
    PagedLogError,
    PageWriter,
    PageWriterClosedError,
    PageWriterNotSetupError,
    PageWriterStateError,
    PagingContext,
    WriterState,
)

__all__ = [
    "DiskFullError",
    "LOG_NAME",
    "LOG_TYPE",
    "PAGE_SIZE",
    "Page",
    "PageLine",
    "PageReader",
    "PageSequenceError",
    "PageWriter",
    "PageWriterClosedError",
    "PageWriterNotSetupError",
    "PageWriterStateError",
    "PagedLogError",
    "PagingContext",
    "WriterState",
    "format_line",
    "list_log_ids",
    "parse_line",
]
