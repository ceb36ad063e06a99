"""Tests for single page files."""

import errno
import tempfile
from pathlib import Path

import pytest

import pagedlog.core.pages.page as page_module
from pagedlog.core.pages.page import DiskFullError, Page


class TestPage:
    """Test Page class."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for tests."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_create_page(self, temp_dir):
        """Test creating a new page."""
        page = Page(temp_dir, "abc", 1)

        assert page.path == temp_dir / "abc_1.log"
        assert page.path.exists()
        assert page.byte_count == 0
        assert not page.closed

        page.close()

    def test_create_is_exclusive(self, temp_dir):
        """Test an existing file is never reused."""
        (temp_dir / "abc_1.log").write_text("keep me\n", encoding="utf-8")

        with pytest.raises(FileExistsError):
            Page(temp_dir, "abc", 1)

        assert (temp_dir / "abc_1.log").read_text(encoding="utf-8") == "keep me\n"

    def test_write_line_counts_bytes(self, temp_dir):
        """Test byte counting excludes the terminator."""
        page = Page(temp_dir, "abc", 1)

        assert page.write_line("hello") == 5
        assert page.write_line("wörld") == 6
        assert page.byte_count == 11
        assert page.lines_written == 2

        page.close()

        assert page.path.read_text(encoding="utf-8").splitlines() == ["hello", "wörld"]

    def test_line_and_terminator_written_together(self, temp_dir):
        """Test a line never reaches the file without its terminator."""
        page = Page(temp_dir, "abc", 1)
        real_file = page._file
        writes = []

        class RecordingFile:
            def write(self, data):
                writes.append(data)
                return real_file.write(data)

        page._file = RecordingFile()
        page.write_line("hello")
        page._file = real_file
        page.close()

        assert writes == ["hello\n"]
        assert page.path.read_bytes().rstrip(b"\r\n") == b"hello"

    def test_is_full(self, temp_dir):
        """Test the full check is inclusive of the threshold."""
        page = Page(temp_dir, "abc", 1)
        page.write_line("x" * 9)

        assert not page.is_full(10)

        page.write_line("x")

        assert page.is_full(10)

        page.close()

    def test_flush_reaches_disk(self, temp_dir):
        """Test flush writes buffered text to the file."""
        page = Page(temp_dir, "abc", 1)
        page.write_line("hello")

        page.flush()

        assert page.path.stat().st_size > 0

        page.close()

    def test_write_after_close_raises(self, temp_dir):
        """Test a closed page rejects writes."""
        page = Page(temp_dir, "abc", 1)
        page.close()

        with pytest.raises(ValueError, match="closed page"):
            page.write_line("late")

    def test_close_twice(self, temp_dir):
        """Test close is idempotent."""
        page = Page(temp_dir, "abc", 1)
        page.write_line("hello")

        page.close()
        page.close()

        assert page.closed

    def test_context_manager(self, temp_dir):
        """Test using a page as context manager."""
        with Page(temp_dir, "abc", 2) as page:
            page.write_line("hello")

        assert page.closed
        assert page.path.name == "abc_2.log"

    def test_disk_full(self, temp_dir, monkeypatch):
        """Test ENOSPC surfaces as DiskFullError."""
        def no_space(*args, **kwargs):
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr(page_module, "open", no_space, raising=False)

        with pytest.raises(DiskFullError) as exc_info:
            Page(temp_dir, "abc", 1)

        assert isinstance(exc_info.value, OSError)
        assert exc_info.value.errno == errno.ENOSPC

    def test_invalid_sequence_raises(self, temp_dir):
        """Test sequence numbers start at 1."""
        with pytest.raises(ValueError, match="Page sequence must be >= 1"):
            Page(temp_dir, "abc", 0)
