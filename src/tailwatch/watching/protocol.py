"""Interfaces between watchers, notifiers and the host."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from tailwatch.watching.types import Status

StatusCallback = Callable[[Status], None]


@runtime_checkable
class Watcher(Protocol):
    """Lifecycle contract every watcher variant implements.

    Implementations:
    - FileTailWatcher: last N lines of a growing file

    The host only talks to watchers through this protocol.
    """

    @property
    def active(self) -> bool:
        """True while the watcher processes notifications."""
        ...

    def start(self, callback: StatusCallback | None = None) -> None:
        """Begin watching. Failures are reported as a status, never raised."""
        ...

    def stop(self) -> None:
        """Release the watch. Idempotent."""
        ...

    def describe(self) -> str:
        """Human-readable identity used in status descriptions."""
        ...


class ChangeNotifier(Protocol):
    """Delivers file modification events on the event loop thread.

    Implementations:
    - WatchdogNotifier: native OS events via watchdog
    - PollingNotifier: stat() polling from an asyncio task
    """

    def register_modify_watch(self, path: Path, callback: Callable[[], None]) -> Any:
        """Watch ``path`` for modifications.

        Returns:
            An opaque token to pass to cancel().

        Raises:
            NotifierRegistrationFailure: If the watch cannot be set up.
        """
        ...

    def cancel(self, token: Any) -> None:
        """Stop delivering events for ``token``."""
        ...

    def close(self) -> None:
        """Cancel every registration and release OS resources."""
        ...
