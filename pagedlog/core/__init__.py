"""Core components for paged log storage."""

from pagedlog.core import pages

__all__ = ["pages"]
