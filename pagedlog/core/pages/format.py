"""
Line and file-name formats for log pages.

A page is plain UTF-8 text. Every line is a UTC timestamp followed by a
single space and the original message:

    2024-05-01T12:30:45.123456Z Step started

Pages are named ``{log_id}_{sequence}.log`` so the order of a log's pages
can be recovered from the directory listing alone.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Tuple

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
PAGE_FILE_SUFFIX = ".log"
ENCODING = "utf-8"


@dataclass(frozen=True)
class PageLine:
    """
    A single parsed page line.

    Attributes:
        timestamp: When the line was written (aware, UTC)
        message: The message as passed to the writer
    """

    timestamp: datetime
    message: str


def format_timestamp(timestamp: datetime) -> str:
    """
    Render a timestamp in round-trippable ISO-8601 UTC form.

    Naive datetimes are taken to already be UTC.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.strftime(TIMESTAMP_FORMAT)


def format_line(message: str, timestamp: datetime) -> str:
    """
    Build the text of one page line, without terminator.

    Args:
        message: Free-text log message
        timestamp: Time the message was written

    Returns:
        ``"<timestamp> <message>"``
    """
    return f"{format_timestamp(timestamp)} {message}"


def parse_line(line: str) -> PageLine:
    """
    Parse a page line produced by :func:`format_line`.

    Args:
        line: Line text, with or without its terminator

    Returns:
        Parsed line

    Raises:
        ValueError: If the line has no valid timestamp prefix
    """
    line = line.rstrip("\r\n")
    stamp, sep, message = line.partition(" ")
    if not sep:
        raise ValueError(f"Malformed page line: {line!r}")

    timestamp = datetime.strptime(stamp, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    return PageLine(timestamp=timestamp, message=message)


def encoded_size(line: str) -> int:
    """UTF-8 byte length of ``line``."""
    return len(line.encode(ENCODING))


def page_file_name(log_id: str, sequence: int) -> str:
    """
    Build the file name of a page.

    Raises:
        ValueError: If sequence is below 1
    """
    if sequence < 1:
        raise ValueError(f"Page sequence must be >= 1, got {sequence}")
    return f"{log_id}_{sequence}{PAGE_FILE_SUFFIX}"


def parse_page_file_name(name: str) -> Tuple[str, int]:
    """
    Split a page file name into ``(log_id, sequence)``.

    Raises:
        ValueError: If name is not a page file name
    """
    if not name.endswith(PAGE_FILE_SUFFIX):
        raise ValueError(f"Not a page file: {name!r}")

    stem = name[: -len(PAGE_FILE_SUFFIX)]
    log_id, sep, sequence = stem.rpartition("_")
    if not sep or not log_id or not sequence.isdigit():
        raise ValueError(f"Not a page file: {name!r}")

    number = int(sequence)
    if number < 1:
        raise ValueError(f"Not a page file: {name!r}")
    return log_id, number
