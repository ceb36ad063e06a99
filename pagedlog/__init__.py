"""
pagedlog - A paged log writer.

Writes the log output of a unit of work into fixed-size page files and
hands each completed page to an upload queue:
- Lazy page creation on first write
- Size-based page rotation that never splits a line
- Exactly one upload notification per completed page
- Page order recoverable from file names alone
"""

__version__ = "0.1.0"

from pagedlog.core import pages
from pagedlog import upload

__all__ = [
    "pages",
    "upload",
]
