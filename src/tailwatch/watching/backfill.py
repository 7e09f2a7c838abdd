"""Initial read of a file's tail, scanning backwards from the end.

Only the last ``window_size`` lines that pass the filter are wanted, so the
file is read in fixed-size blocks from the end towards the start and the scan
stops as soon as enough lines were accepted. Memory stays bounded by the
block size plus the longest line, whatever the file size.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO, NamedTuple

from tailwatch.logging import get_logger
from tailwatch.watching.errors import FileUnavailable
from tailwatch.watching.framing import LINE_TERMINATOR, decode_line
from tailwatch.watching.types import LineFilter, accept_all

log = get_logger("watching.backfill")

DEFAULT_BLOCK_SIZE = 8192


class BackfillResult(NamedTuple):
    """Accepted lines (oldest first) and the handle left at end-of-file."""

    lines: list[str]
    handle: BinaryIO


def iter_lines_backwards(
    handle: BinaryIO, block_size: int = DEFAULT_BLOCK_SIZE
) -> Iterator[bytes]:
    """Yield raw lines of ``handle`` from the last one to the first.

    A terminator at the very end of the file does not produce an empty
    trailing line. Terminators are not included in the yielded lines.
    """
    if block_size < 1:
        raise ValueError(f"block_size must be positive, got {block_size}")

    position = handle.seek(0, os.SEEK_END)
    if position == 0:
        return

    carry = b""  # start of the earliest line seen so far, possibly incomplete
    at_end = True
    while position > 0:
        read_size = min(block_size, position)
        position -= read_size
        handle.seek(position)
        block = handle.read(read_size) + carry

        if at_end:
            at_end = False
            if block.endswith(LINE_TERMINATOR):
                block = block[:-1]

        head, *lines = block.split(LINE_TERMINATOR)
        carry = head
        yield from reversed(lines)

    yield carry


def backfill(
    path: Path,
    window_size: int,
    line_filter: LineFilter = accept_all,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> BackfillResult:
    """Collect the last ``window_size`` filtered lines of ``path``.

    Empty lines are skipped and rejected lines do not count toward the
    limit. The returned handle is positioned at the current end of the file,
    so later reads only observe appended data.

    Raises:
        FileUnavailable: If the file cannot be opened for reading.
    """
    try:
        handle = open(path, "rb")  # noqa: SIM115
    except OSError as e:
        raise FileUnavailable(Path(path), e) from e

    try:
        accepted: list[str] = []
        scanned = 0
        for raw in iter_lines_backwards(handle, block_size):
            scanned += 1
            line = decode_line(raw)
            if not line or not line_filter(line):
                continue
            accepted.append(line)
            if len(accepted) >= window_size:
                break
        accepted.reverse()

        handle.seek(0, os.SEEK_END)
    except BaseException:
        handle.close()
        raise

    log.debug(
        "Backfilled %s: %d of %d scanned lines accepted", path, len(accepted), scanned
    )
    return BackfillResult(accepted, handle)
