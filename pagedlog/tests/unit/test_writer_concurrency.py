"""Tests for concurrent use of page writers."""

import tempfile
import threading
import uuid
from pathlib import Path

import pytest

from pagedlog.core.pages.format import encoded_size, parse_line
from pagedlog.core.pages.writer import PageWriter
from pagedlog.upload.queue import RecordingUploadQueue


class TestConcurrentWrites:
    """Test concurrent writes and rotation."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for tests."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_concurrent_writes_rotate_cleanly(self, temp_dir):
        """Test rotation never interleaves with a concurrent write."""
        upload_queue = RecordingUploadQueue()
        page_size = 500
        writer = PageWriter(temp_dir, upload_queue, page_size=page_size)
        writer.setup(uuid.uuid4(), uuid.uuid4())

        def produce(thread_id, count):
            for i in range(count):
                writer.write(f"thread-{thread_id} msg-{i}")

        threads = []
        for i in range(5):
            t = threading.Thread(target=produce, args=(i, 100))
            threads.append(t)
            t.start()

        for t in threads:
            t.join()

        writer.end()

        paths = upload_queue.paths
        assert len(paths) == len(set(paths))
        assert [p.name for p in paths] == [
            f"{writer.log_id}_{n}.log" for n in range(1, len(paths) + 1)
        ]

        total = 0
        for index, path in enumerate(paths):
            with open(path, "r", encoding="utf-8") as f:
                lines = [line.rstrip("\n") for line in f]
            for line in lines:
                parse_line(line)
            size = sum(encoded_size(line) for line in lines)
            if index < len(paths) - 1:
                assert size >= page_size
                # only the last line may have crossed the threshold
                assert size - encoded_size(lines[-1]) < page_size
            total += len(lines)

        assert total == 500

    def test_writers_created_concurrently_never_collide(self, temp_dir):
        """Test concurrently created writers produce distinct files."""
        upload_queue = RecordingUploadQueue()
        log_ids = []
        lock = threading.Lock()

        def run():
            writer = PageWriter(temp_dir, upload_queue, page_size=64)
            writer.setup(uuid.uuid4(), uuid.uuid4())
            for i in range(5):
                writer.write(f"line {i}")
            writer.end()
            with lock:
                log_ids.append(writer.log_id)

        threads = [threading.Thread(target=run) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(log_ids)) == 20
        paths = upload_queue.paths
        assert len(paths) == len(set(paths))
        assert sorted(paths) == sorted(temp_dir.iterdir())
