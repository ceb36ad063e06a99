#!/usr/bin/env python3
"""
Page writer example: a step writes log output that is paged and uploaded.
"""

import argparse
import tempfile
import time
import uuid
from pathlib import Path

from pagedlog.core.pages.writer import PagingContext
from pagedlog.upload.queue import FileUploadQueue
from pagedlog.upload.uploader import DirectoryUploader
from pagedlog.utils.logging import configure_logging


def main():
    parser = argparse.ArgumentParser(description='pagedlog page writer example')
    parser.add_argument('--lines', type=int, default=1000, help='Number of lines to write')
    parser.add_argument('--page-size', type=int, default=16 * 1024, help='Page size in bytes')
    parser.add_argument('--work-dir', default=None, help='Directory for pages and uploads')
    args = parser.parse_args()

    configure_logging(log_level='WARNING', log_format='console')

    work_dir = Path(args.work_dir or tempfile.mkdtemp(prefix='pagedlog-'))
    store = work_dir / 'store'

    print(f"Writing {args.lines} lines in {args.page_size}-byte pages under {work_dir}")

    with FileUploadQueue(DirectoryUploader(store)) as upload_queue:
        context = PagingContext(work_dir / 'diag', upload_queue, page_size=args.page_size)

        with context.create_writer() as writer:
            writer.setup(uuid.uuid4(), uuid.uuid4())

            for i in range(args.lines):
                writer.write(f"step output {i}: {'.' * (i % 40)}")

                if (i + 1) % 250 == 0:
                    print(f"Wrote {i + 1} lines, page {writer.metrics()['current_sequence']}...")

        start = time.time()
        upload_queue.drain()
        metrics = upload_queue.metrics()

    print(f"\n[OK] Uploaded {metrics['uploaded']} pages in {time.time() - start:.3f}s")
    for path in sorted(store.rglob('*.log')):
        print(f"  {path.relative_to(store)}")


if __name__ == '__main__':
    main()
