"""Watch a file and report newly appended lines, a-la ``tail -f``.

On start the watcher reports the last N lines that pass its filter, then
reports again every time an appended line passes the filter. Only the most
recent N accepted lines are kept.

Lifecycle:
    CREATED -> STARTING -> ACTIVE -> STOPPED
                       \\-> FAILED  (also ACTIVE -> FAILED if the live
                                     handle becomes unusable)

FAILED and STOPPED are terminal; a new instance is needed to try again.

Known limitation: truncation and rotation are not detected. The live handle
keeps its byte offset, so after a truncate the watcher sees nothing until the
file grows past the old size again, and after a rename it keeps reading the
old inode.

Memory stays bounded while following: appended data is read in blocks of
``block_size`` bytes, and an unterminated line is held back only up to
``max_line_bytes``. A longer line is reported in pieces of about that size.
"""

from __future__ import annotations

import errno
import itertools
from typing import Any, BinaryIO

from tailwatch.logging import get_logger
from tailwatch.watching.backfill import DEFAULT_BLOCK_SIZE, backfill
from tailwatch.watching.buffer import BoundedEventBuffer
from tailwatch.watching.framing import MAX_LINE_BYTES, LineFramer
from tailwatch.watching.protocol import ChangeNotifier, StatusCallback
from tailwatch.watching.types import Level, LogLine, Status, WatcherState, WatchSpec

log = get_logger("watching.file_tail")


def _is_permanent(error: BaseException) -> bool:
    """True if ``error`` means the live handle can never be read again."""
    if isinstance(error, ValueError):
        # I/O operation on closed file
        return True
    return isinstance(error, OSError) and error.errno in (errno.EBADF, errno.ESTALE)


class FileTailWatcher:
    """Tail one file into a bounded window of accepted lines.

    Status callbacks receive a copy of the window every time it changes, so
    a receiver can keep a status around without it changing underneath.
    All state is touched only from the event loop thread: from start(),
    stop(), and the notifier callback.

    Example:
        spec = WatchSpec(Path("/var/log/messages"), window_size=10,
                         filter=lambda line: "cron" not in line)
        watcher = FileTailWatcher(spec, print, WatchdogNotifier())
        watcher.start()
    """

    def __init__(
        self,
        spec: WatchSpec,
        callback: StatusCallback | None,
        notifier: ChangeNotifier,
        block_size: int = DEFAULT_BLOCK_SIZE,
        max_line_bytes: int = MAX_LINE_BYTES,
    ) -> None:
        self._spec = spec
        self._callback = callback
        self._notifier = notifier
        self._block_size = block_size
        self._max_line_bytes = max_line_bytes

        self._state = WatcherState.CREATED
        self._handle: BinaryIO | None = None
        self._framer = LineFramer()
        self._buffer: BoundedEventBuffer[LogLine] = BoundedEventBuffer(
            spec.window_size, spec.emit_order
        )
        self._guard: Any = None
        self._sequence = itertools.count(1)

    @property
    def spec(self) -> WatchSpec:
        return self._spec

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is WatcherState.ACTIVE

    def describe(self) -> str:
        return self._spec.description or f"FileWatcher [{self._spec.path}]"

    def snapshot(self) -> tuple[LogLine, ...]:
        """Copy of the current window in emit order."""
        return self._buffer.snapshot()

    def start(self, callback: StatusCallback | None = None) -> None:
        """Backfill, report, and begin following the file.

        Any failure (missing file, unreadable file, notifier refusing the
        watch) is reported as one lowest-severity status and leaves the
        watcher FAILED. Nothing is raised to the caller.

        Args:
            callback: Replaces the status callback given at construction.
        """
        if callback is not None:
            self._callback = callback
        if self._state is not WatcherState.CREATED:
            log.warning("%s: start() ignored in state %s", self.describe(), self._state)
            return

        self._state = WatcherState.STARTING
        try:
            result = backfill(
                self._spec.path, self._spec.window_size, self._spec.filter, self._block_size
            )
            self._handle = result.handle
            for line in result.lines:
                self._buffer.insert(self._make_line(line))
            self._emit_snapshot()
            if self._state is not WatcherState.STARTING:
                # Stopped from inside the callback
                return

            self._guard = self._notifier.register_modify_watch(
                self._spec.path, self._on_modify
            )
        except Exception as e:
            self._fail(e)
            return

        self._state = WatcherState.ACTIVE
        log.info("%s started with %d lines", self.describe(), len(self._buffer))

    def stop(self) -> None:
        """Stop following the file. Safe to call repeatedly, in any state."""
        if self._state in (WatcherState.STOPPED, WatcherState.FAILED):
            return
        self._release()
        self._state = WatcherState.STOPPED
        log.info("%s stopped", self.describe())

    def _on_modify(self) -> None:
        """Read appended data block by block and report each accepted line."""
        while self.active and self._handle is not None:
            try:
                chunk = self._handle.read(self._block_size)
            except (OSError, ValueError) as e:
                if _is_permanent(e):
                    self._fail(e)
                else:
                    log.warning("%s: skipped notification, read failed: %s", self.describe(), e)
                return

            if not chunk:
                return

            lines = self._framer.feed(chunk)
            if len(self._framer.pending) >= self._max_line_bytes:
                overlong = self._framer.flush()
                if overlong is not None:
                    log.warning(
                        "%s: line longer than %d bytes, reporting it in pieces",
                        self.describe(),
                        self._max_line_bytes,
                    )
                    lines.append(overlong)

            for line in lines:
                if not self.active:
                    # A status callback stopped us mid-chunk
                    return
                if not self._accepts(line):
                    continue
                self._buffer.insert(self._make_line(line))
                self._emit_snapshot()

            if len(chunk) < self._block_size:
                return

    def _accepts(self, line: str) -> bool:
        try:
            return bool(self._spec.filter(line))
        except Exception:
            log.exception("%s: filter raised on %r, line dropped", self.describe(), line)
            return False

    def _make_line(self, content: str) -> LogLine:
        return LogLine(content=content, sequence=next(self._sequence))

    def _emit_snapshot(self) -> None:
        self._emit(
            Status(
                watcher=self,
                level=Level.NOTICE,
                description=self.describe,
                items=self._buffer.snapshot(),
            )
        )

    def _fail(self, error: BaseException) -> None:
        """Release everything and report ``error`` at the lowest severity."""
        self._release()
        self._state = WatcherState.FAILED
        message = str(error)
        log.error("%s failed: %s", self.describe(), message)
        self._emit(
            Status(
                watcher=self,
                level=Level.ANY,
                description=lambda: f"{self.describe()} : {message}",
            )
        )

    def _release(self) -> None:
        guard, self._guard = self._guard, None
        if guard is not None:
            try:
                self._notifier.cancel(guard)
            except Exception:
                log.exception("%s: error cancelling watch", self.describe())

        handle, self._handle = self._handle, None
        if handle is not None:
            try:
                handle.close()
            except OSError as e:
                log.debug("%s: error closing handle: %s", self.describe(), e)

    def _emit(self, status: Status) -> None:
        if self._callback is None:
            return
        try:
            self._callback(status)
        except Exception:
            log.exception("%s: status callback raised", self.describe())

    def __repr__(self) -> str:
        return f"<FileTailWatcher {self._spec.path} {self._state} {len(self._buffer)} lines>"
