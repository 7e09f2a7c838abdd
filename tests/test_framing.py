"""Tests for incremental line framing."""

from __future__ import annotations

from tailwatch.watching.framing import LineFramer, decode_line, frame


class TestFrame:
    """Tests for the pure frame() function."""

    def test_partial_then_complete(self) -> None:
        """A line split across two chunks comes out whole, once."""
        lines, pending = frame(b"abc")
        assert lines == []
        assert pending == b"abc"

        lines, pending = frame(b"def\n", pending)
        assert lines == ["abcdef"]
        assert pending == b""

    def test_multiple_lines_in_one_chunk(self) -> None:
        lines, pending = frame(b"one\ntwo\nthree\n")
        assert lines == ["one", "two", "three"]
        assert pending == b""

    def test_trailing_fragment_is_kept(self) -> None:
        lines, pending = frame(b"one\ntw")
        assert lines == ["one"]
        assert pending == b"tw"

    def test_empty_chunk(self) -> None:
        assert frame(b"", b"abc") == ([], b"abc")
        assert frame(b"") == ([], b"")

    def test_empty_lines_are_lines(self) -> None:
        lines, pending = frame(b"\n\nx\n")
        assert lines == ["", "", "x"]
        assert pending == b""

    def test_crlf_stripped(self) -> None:
        lines, _ = frame(b"dos line\r\nunix line\n")
        assert lines == ["dos line", "unix line"]

    def test_pending_never_contains_terminator(self) -> None:
        pending = b""
        for chunk in (b"a", b"b\nc", b"\n", b"d\ne\nf"):
            _, pending = frame(chunk, pending)
            assert b"\n" not in pending
        assert pending == b"f"

    def test_multibyte_character_split_across_chunks(self) -> None:
        """UTF-8 sequences cut mid-character decode correctly once complete."""
        data = "héllo wörld\n".encode()
        cut = data.index("é".encode()) + 1
        lines, pending = frame(data[:cut])
        assert lines == []
        lines, pending = frame(data[cut:], pending)
        assert lines == ["héllo wörld"]

    def test_invalid_utf8_replaced(self) -> None:
        lines, _ = frame(b"bad \xff byte\n")
        assert lines == ["bad � byte"]


class TestLineFramer:
    """Tests for the stateful wrapper."""

    def test_feed_holds_pending(self) -> None:
        framer = LineFramer()
        assert framer.feed(b"abc") == []
        assert framer.pending == b"abc"
        assert framer.feed(b"def\nghi") == ["abcdef"]
        assert framer.pending == b"ghi"

    def test_decode_line_only_strips_one_cr(self) -> None:
        assert decode_line(b"x\r\r") == "x\r"

    def test_flush_returns_pending_line(self) -> None:
        framer = LineFramer()
        framer.feed(b"done\npartial\r")
        assert framer.flush() == "partial"
        assert framer.pending == b""

    def test_flush_when_nothing_pending(self) -> None:
        framer = LineFramer()
        assert framer.flush() is None
        framer.feed(b"complete\n")
        assert framer.flush() is None
