"""Tests for the backward-scanning initial read."""

from __future__ import annotations

import io
import os
from pathlib import Path

import pytest

from tailwatch.watching.backfill import backfill, iter_lines_backwards
from tailwatch.watching.errors import FileUnavailable
from tests.utils import write_lines


class TestIterLinesBackwards:
    """Block-wise reverse line iteration."""

    @pytest.mark.parametrize("block_size", [1, 2, 3, 5, 8192])
    def test_yields_last_line_first(self, block_size: int) -> None:
        handle = io.BytesIO(b"alpha\nbeta\ngamma\n")
        assert list(iter_lines_backwards(handle, block_size)) == [b"gamma", b"beta", b"alpha"]

    @pytest.mark.parametrize("block_size", [1, 4, 8192])
    def test_unterminated_last_line(self, block_size: int) -> None:
        handle = io.BytesIO(b"alpha\nbeta")
        assert list(iter_lines_backwards(handle, block_size)) == [b"beta", b"alpha"]

    def test_empty_file(self) -> None:
        assert list(iter_lines_backwards(io.BytesIO(b""))) == []

    def test_blank_lines_preserved(self) -> None:
        handle = io.BytesIO(b"a\n\nb\n")
        assert list(iter_lines_backwards(handle, 2)) == [b"b", b"", b"a"]

    def test_only_reads_what_it_needs(self) -> None:
        """Stopping early leaves the front of a large file unread."""
        class CountingBytesIO(io.BytesIO):
            bytes_read = 0

            def read(self, size: int | None = -1) -> bytes:
                chunk = super().read(size)
                self.bytes_read += len(chunk)
                return chunk

        data = b"".join(b"line %d\n" % i for i in range(10_000))
        handle = CountingBytesIO(data)
        lines = iter_lines_backwards(handle, 64)
        assert next(lines) == b"line 9999"
        assert next(lines) == b"line 9998"
        assert handle.bytes_read <= 128

    def test_rejects_bad_block_size(self) -> None:
        with pytest.raises(ValueError):
            list(iter_lines_backwards(io.BytesIO(b"x"), 0))


class TestBackfill:
    """backfill(): last N filtered lines plus a handle at EOF."""

    def test_last_n_lines_oldest_first(self, tmp_path: Path) -> None:
        path = write_lines(tmp_path / "log", ["a", "b", "c", "d", "e"])
        result = backfill(path, 3)
        try:
            assert result.lines == ["c", "d", "e"]
        finally:
            result.handle.close()

    def test_fewer_lines_than_window(self, tmp_path: Path) -> None:
        path = write_lines(tmp_path / "log", ["a", "b"])
        result = backfill(path, 10)
        try:
            assert result.lines == ["a", "b"]
        finally:
            result.handle.close()

    def test_filtered_lines_do_not_count(self, tmp_path: Path) -> None:
        path = write_lines(tmp_path / "log", ["keep 1", "drop", "keep 2", "drop", "drop"])
        result = backfill(path, 2, lambda line: line.startswith("keep"), block_size=4)
        try:
            assert result.lines == ["keep 1", "keep 2"]
        finally:
            result.handle.close()

    def test_empty_lines_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "log"
        path.write_bytes(b"a\n\n\r\nb\n\n")
        result = backfill(path, 5)
        try:
            assert result.lines == ["a", "b"]
        finally:
            result.handle.close()

    def test_length_is_min_of_window_and_accepted(self, tmp_path: Path) -> None:
        lines = [f"{'even' if i % 2 == 0 else 'odd'} {i}" for i in range(25)]
        path = write_lines(tmp_path / "log", lines)
        accepted = [line for line in lines if line.startswith("even")]
        for window in (1, 5, 13, 50):
            result = backfill(path, window, lambda line: line.startswith("even"), block_size=16)
            try:
                assert len(result.lines) == min(window, len(accepted))
                assert result.lines == accepted[-window:]
            finally:
                result.handle.close()

    def test_handle_positioned_at_end(self, tmp_path: Path) -> None:
        path = write_lines(tmp_path / "log", ["a", "b", "c"])
        result = backfill(path, 1)
        try:
            assert result.handle.tell() == os.path.getsize(path)
            with open(path, "ab") as f:
                f.write(b"d\n")
            assert result.handle.read() == b"d\n"
        finally:
            result.handle.close()

    def test_missing_file(self, tmp_path: Path) -> None:
        missing = tmp_path / "nope.log"
        with pytest.raises(FileUnavailable) as exc_info:
            backfill(missing, 3)
        assert exc_info.value.path == missing
        assert isinstance(exc_info.value.error, FileNotFoundError)

    def test_filter_error_closes_handle(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_lines(tmp_path / "log", ["a"])
        opened = []
        real_open = open

        def tracking_open(*args, **kwargs):
            handle = real_open(*args, **kwargs)
            opened.append(handle)
            return handle

        monkeypatch.setattr("builtins.open", tracking_open)

        def broken(line: str) -> bool:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            backfill(path, 3, broken)
        assert opened and all(h.closed for h in opened)
