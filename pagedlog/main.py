#!/usr/bin/env python3
"""
Command-line entry point for pagedlog.

Usage:
    # Page stdin into <diag_dir>/pages and upload completed pages
    some-build-step | python -m pagedlog.main write --timeline-id <uuid> --record-id <uuid>

    # Print a log reassembled from its pages
    python -m pagedlog.main read --log-id <log id>

    # List logs with pages on disk
    python -m pagedlog.main list
"""

import argparse
import sys
import uuid
from pathlib import Path
from typing import List, Optional

from pagedlog.core.pages.format import format_timestamp
from pagedlog.core.pages.reader import PageReader, list_log_ids
from pagedlog.core.pages.writer import PAGING_FOLDER, PagingContext
from pagedlog.upload.queue import FileUploadQueue, RecordingUploadQueue
from pagedlog.upload.uploader import DirectoryUploader
from pagedlog.utils.config import Config
from pagedlog.utils.logging import configure_logging, get_logger
from pagedlog.utils.trace import TraceSetting

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='pagedlog - write log output as fixed-size pages and ship them'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='YAML configuration file'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: from configuration)'
    )

    parser.add_argument(
        '--log-format',
        type=str,
        default=None,
        choices=['json', 'console'],
        help='Logging format (default: from configuration)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    write = subparsers.add_parser('write', help='Page lines from stdin')
    write.add_argument(
        '--timeline-id',
        type=uuid.UUID,
        default=None,
        help='Owning timeline id (default: random)'
    )
    write.add_argument(
        '--record-id',
        type=uuid.UUID,
        default=None,
        help='Owning timeline record id (default: random)'
    )
    write.add_argument(
        '--debug-logging',
        action='store_true',
        help='Mirror debug lines ("##[debug]" prefix) to the process log'
    )
    write.add_argument(
        '--dry-run',
        action='store_true',
        help='Keep completed pages on disk instead of uploading them'
    )

    read = subparsers.add_parser('read', help='Print a log from its pages')
    read.add_argument('--log-id', type=str, required=True, help='Log identity')
    read.add_argument(
        '--raw',
        action='store_true',
        help='Print messages only, without timestamps'
    )

    subparsers.add_parser('list', help='List logs with pages on disk')

    return parser.parse_args(argv)


DEBUG_PREFIX = "##[debug]"


def run_write(args, config: Config) -> int:
    """Page stdin and upload every completed page."""
    if args.dry_run:
        upload_queue = RecordingUploadQueue()
    else:
        upload_queue = FileUploadQueue(
            DirectoryUploader(Path(config.get("upload.target_dir"))),
            worker_count=int(config.get("upload.workers", 1)),
        )
        upload_queue.start()

    context = PagingContext.from_config(config, upload_queue)
    writer = context.create_writer()
    writer.setup(
        args.timeline_id or uuid.uuid4(),
        args.record_id or uuid.uuid4(),
        courtesy_debug_logging=args.debug_logging,
    )

    try:
        with writer:
            for line in sys.stdin:
                message = line.rstrip("\r\n")
                writer.write(message, is_debug_message=message.startswith(DEBUG_PREFIX))
    finally:
        if isinstance(upload_queue, FileUploadQueue):
            upload_queue.close(timeout=float(config.get("upload.drain_timeout_s", 30.0)))

    print(writer.log_id)
    logger.info("Finished writing log", **writer.metrics())
    return 0


def run_read(args, config: Config) -> int:
    """Print every line of a log in order."""
    pages_dir = Path(config.get("pages.diag_dir")) / PAGING_FOLDER
    reader = PageReader(pages_dir, args.log_id)

    for page_line in reader.read_lines():
        if args.raw:
            print(page_line.message)
        else:
            print(f"{format_timestamp(page_line.timestamp)} {page_line.message}")
    return 0


def run_list(args, config: Config) -> int:
    """Print the log identities present in the pages directory."""
    pages_dir = Path(config.get("pages.diag_dir")) / PAGING_FOLDER
    if not pages_dir.exists():
        return 0

    for log_id in list_log_ids(pages_dir):
        print(log_id)
    return 0


COMMANDS = {
    'write': run_write,
    'read': run_read,
    'list': run_list,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config = Config(args.config)
    if args.log_level:
        config.set("logging.level", args.log_level)
    if args.log_format:
        config.set("logging.format", args.log_format)

    configure_logging(
        log_level=config.get("logging.level", "INFO"),
        log_format=config.get("logging.format", "console"),
    )
    trace = TraceSetting.from_dict(config.get("trace"))
    trace.apply(include_default=trace.default_is_explicit and args.log_level is None)

    try:
        return COMMANDS[args.command](args, config)
    except OSError as e:
        logger.error("I/O error", command=args.command, error=str(e), exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
