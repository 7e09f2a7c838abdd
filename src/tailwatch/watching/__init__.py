"""File tail watching for tailwatch.

Reports the last N lines of a file that pass a filter, then follows the file
and reports every newly appended line that passes, keeping only the most
recent N. Modification events come from a ChangeNotifier (watchdog or
polling) and are always handled on the asyncio loop thread.
"""

from tailwatch.watching.backfill import BackfillResult, backfill, iter_lines_backwards
from tailwatch.watching.buffer import BoundedEventBuffer
from tailwatch.watching.errors import (
    FileUnavailable,
    NotifierRegistrationFailure,
    TailWatchError,
)
from tailwatch.watching.file_tail import FileTailWatcher
from tailwatch.watching.filters import build_filter
from tailwatch.watching.framing import LineFramer, frame
from tailwatch.watching.notifier import (
    PollingNotifier,
    WatchdogNotifier,
    create_notifier,
)
from tailwatch.watching.protocol import ChangeNotifier, StatusCallback, Watcher
from tailwatch.watching.types import (
    EmitOrder,
    Level,
    LineFilter,
    LogLine,
    Status,
    WatcherState,
    WatchSpec,
    accept_all,
)

__all__ = [
    # Watchers
    "FileTailWatcher",
    "Watcher",
    "WatchSpec",
    "WatcherState",
    "EmitOrder",
    # Statuses
    "Level",
    "LogLine",
    "Status",
    "StatusCallback",
    # Building blocks
    "BackfillResult",
    "backfill",
    "iter_lines_backwards",
    "BoundedEventBuffer",
    "LineFramer",
    "frame",
    # Filters
    "LineFilter",
    "accept_all",
    "build_filter",
    # Notifiers
    "ChangeNotifier",
    "PollingNotifier",
    "WatchdogNotifier",
    "create_notifier",
    # Errors
    "TailWatchError",
    "FileUnavailable",
    "NotifierRegistrationFailure",
]
