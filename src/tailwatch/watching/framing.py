"""Incremental line framing for appended file data.

Bytes arrive in arbitrary chunks: a chunk may end mid-line, or even in the
middle of a multi-byte character. Complete lines are split off as soon as
their terminator is seen; whatever follows the last terminator is held back
as the pending fragment until the next chunk arrives.

Line terminator is ``\\n``; a preceding ``\\r`` is stripped as well so CRLF
files frame the same way. Lines are decoded as UTF-8 with replacement
characters for invalid sequences.
"""

from __future__ import annotations

LINE_TERMINATOR = b"\n"
CONTENT_ENCODING = "utf-8"

# Longest fragment held while waiting for a terminator
MAX_LINE_BYTES = 1024 * 1024


def decode_line(raw: bytes) -> str:
    """Decode one raw line, dropping a trailing carriage return."""
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode(CONTENT_ENCODING, errors="replace")


def frame(chunk: bytes, pending: bytes = b"") -> tuple[list[str], bytes]:
    """Split ``pending + chunk`` into complete lines and a new fragment.

    Args:
        chunk: Newly read bytes (may be empty).
        pending: Unterminated tail carried over from the previous call.

    Returns:
        (lines, fragment) where ``lines`` are complete, decoded lines in file
        order and ``fragment`` is the unterminated remainder. The fragment
        never contains a terminator; it is ``b""`` when the data ended
        exactly on one.

    Example:
        >>> frame(b"abc")
        ([], b'abc')
        >>> frame(b"def\\n", b"abc")
        (['abcdef'], b'')
    """
    data = pending + chunk
    if LINE_TERMINATOR not in data:
        return [], data

    *complete, fragment = data.split(LINE_TERMINATOR)
    return [decode_line(raw) for raw in complete], fragment


class LineFramer:
    """Holds the pending fragment between reads."""

    def __init__(self) -> None:
        self.pending = b""

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk and return the lines it completed."""
        lines, self.pending = frame(chunk, self.pending)
        return lines

    def flush(self) -> str | None:
        """Return the pending fragment as a line and clear it, or None if empty."""
        if not self.pending:
            return None
        raw, self.pending = self.pending, b""
        return decode_line(raw)

    def __repr__(self) -> str:
        return f"<LineFramer pending={len(self.pending)} bytes>"
