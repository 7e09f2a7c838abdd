"""Host engine: runs configured watchers inside an asyncio loop.

The engine owns the shared change notifier, starts every watcher, keeps the
latest status of each one and forwards statuses to a renderer callback. It
only talks to watchers through the Watcher protocol.
"""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Callable

from tailwatch.config.schema import Config
from tailwatch.logging import get_logger, log_status
from tailwatch.watching.file_tail import FileTailWatcher
from tailwatch.watching.notifier import create_notifier
from tailwatch.watching.protocol import ChangeNotifier, Watcher
from tailwatch.watching.types import Status

log = get_logger("engine")


class Engine:
    """Starts, tracks and stops a set of watchers.

    Example:
        engine = Engine(load_config("watch.yaml"), on_status=renderer)
        await engine.run_forever()   # until SIGINT/SIGTERM or request_stop()
    """

    def __init__(
        self,
        config: Config,
        on_status: Callable[[Status], None] | None = None,
        notifier: ChangeNotifier | None = None,
    ) -> None:
        self._config = config
        self._on_status = on_status
        self._notifier = notifier
        self._watchers: list[Watcher] = []
        self._statuses: dict[int, Status] = {}
        self._stop_event = asyncio.Event()
        self._started = False
        self._stopped = False

    @property
    def watchers(self) -> list[Watcher]:
        return list(self._watchers)

    @property
    def statuses(self) -> list[Status]:
        """Latest status of each watcher that has reported, in watcher order."""
        return [self._statuses[id(w)] for w in self._watchers if id(w) in self._statuses]

    def _build_watchers(self, notifier: ChangeNotifier) -> list[Watcher]:
        return [
            FileTailWatcher(entry.to_watch_spec(), self._handle_status, notifier)
            for entry in self._config.watchers
        ]

    def _handle_status(self, status: Status) -> None:
        self._statuses[id(status.watcher)] = status
        log_status(log, status)
        if self._on_status is not None:
            self._on_status(status)

    def start(self) -> None:
        """Create the notifier (if none was given) and start every watcher.

        Must run on the event loop thread: notifiers deliver their events to
        the running loop.
        """
        if self._started:
            return
        self._started = True

        if self._notifier is None:
            self._notifier = create_notifier(
                self._config.notifier.kind, self._config.notifier.poll_interval
            )
        self._watchers = self._build_watchers(self._notifier)

        for watcher in self._watchers:
            watcher.start()
        active = sum(1 for w in self._watchers if w.active)
        log.info("Engine started: %d of %d watchers active", active, len(self._watchers))

    def stop(self) -> None:
        """Stop every watcher and release the notifier. Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        for watcher in self._watchers:
            watcher.stop()
        if self._notifier is not None:
            self._notifier.close()
        log.info("Engine stopped")

    def request_stop(self) -> None:
        """Ask run_forever() to return."""
        self._stop_event.set()

    async def run_forever(self) -> None:
        """Start, wait for request_stop() or SIGINT/SIGTERM, then stop."""
        loop = asyncio.get_running_loop()

        installed: list[signal.Signals] = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Windows, or not on the main thread
                pass

        try:
            self.start()
            await self._stop_event.wait()
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            self.stop()
