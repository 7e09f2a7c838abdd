"""Change notifiers: tell a watcher that its file was modified.

Two implementations share the ChangeNotifier protocol:

- WatchdogNotifier uses native OS events (inotify, FSEvents, kqueue,
  ReadDirectoryChangesW) through the watchdog package. Events arrive on the
  observer thread and are handed to the asyncio loop with
  ``call_soon_threadsafe``, so callbacks always run on the loop thread.
- PollingNotifier compares ``stat()`` results from an asyncio task. It needs
  no OS watch resources and works on file systems without native events.

Neither notifier reads the file; they only say "something changed".
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from tailwatch.logging import get_logger
from tailwatch.watching.errors import NotifierRegistrationFailure

log = get_logger("watching.notifier")

DEFAULT_POLL_INTERVAL = 1.0
MIN_POLL_INTERVAL = 0.05

NOTIFIER_KINDS = ("watchdog", "poll")


def _running_loop(loop: asyncio.AbstractEventLoop | None, path: Path) -> asyncio.AbstractEventLoop:
    if loop is not None:
        return loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise NotifierRegistrationFailure(path, e) from e


class _ModifyHandler(FileSystemEventHandler):
    """Forwards modifications of one file to the event loop."""

    def __init__(
        self,
        path: Path,
        callback: Callable[[], None],
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self.path = path
        self.callback = callback
        self.loop = loop
        self.cancelled = False

    def on_modified(self, event: FileSystemEvent) -> None:
        # Runs on the observer thread: touch nothing but the loop
        if event.is_directory or self.cancelled:
            return
        if os.fsdecode(event.src_path) != str(self.path):
            return
        if self.loop.is_closed():
            return
        try:
            self.loop.call_soon_threadsafe(self._dispatch)
        except RuntimeError:
            # Loop closed between the check and the call
            log.debug("Dropped modify event for %s: loop closed", self.path)

    def _dispatch(self) -> None:
        if not self.cancelled:
            self.callback()


@dataclass(eq=False)
class WatchdogRegistration:
    """Token returned by WatchdogNotifier.register_modify_watch()."""

    path: Path
    handler: _ModifyHandler
    watch: ObservedWatch


class WatchdogNotifier:
    """Native file system events through a shared watchdog Observer.

    Each registration schedules a non-recursive watch on the file's parent
    directory; watchdog reuses one emitter per directory, so several files in
    the same directory cost a single OS watch. The observer thread is started
    on the first registration.

    Example:
        notifier = WatchdogNotifier()
        token = notifier.register_modify_watch(Path("/var/log/syslog"), on_change)
        ...
        notifier.cancel(token)
        notifier.close()
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._observer: BaseObserver | None = None
        self._watch_refs: dict[ObservedWatch, int] = {}
        self._registrations: list[WatchdogRegistration] = []

    @property
    def observer(self) -> BaseObserver:
        """The observer, created and started on first use."""
        if self._observer is None:
            observer = Observer()
            observer.start()
            self._observer = observer
            log.debug("Observer started (%s)", type(observer).__name__)
        return self._observer

    def register_modify_watch(
        self, path: Path, callback: Callable[[], None]
    ) -> WatchdogRegistration:
        target = Path(path).resolve()
        loop = _running_loop(self._loop, target)
        handler = _ModifyHandler(target, callback, loop)

        try:
            watch = self.observer.schedule(handler, str(target.parent), recursive=False)
        except (OSError, RuntimeError) as e:
            raise NotifierRegistrationFailure(target, e) from e

        self._watch_refs[watch] = self._watch_refs.get(watch, 0) + 1
        registration = WatchdogRegistration(target, handler, watch)
        self._registrations.append(registration)
        log.debug("Watching %s via %s", target, watch.path)
        return registration

    def cancel(self, token: WatchdogRegistration) -> None:
        if token.handler.cancelled:
            return
        token.handler.cancelled = True
        if token in self._registrations:
            self._registrations.remove(token)
        if self._observer is None:
            return

        self._observer.remove_handler_for_watch(token.handler, token.watch)
        remaining = self._watch_refs.get(token.watch, 1) - 1
        if remaining > 0:
            self._watch_refs[token.watch] = remaining
            return

        self._watch_refs.pop(token.watch, None)
        try:
            self._observer.unschedule(token.watch)
        except KeyError:
            # Emitter already gone (directory removed)
            log.debug("Watch on %s already unscheduled", token.watch.path)

    def close(self) -> None:
        for registration in list(self._registrations):
            self.cancel(registration)
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            if self._observer.is_alive():
                log.warning("Observer thread did not terminate within timeout")
            self._observer = None


@dataclass(eq=False)
class PollRegistration:
    """Token returned by PollingNotifier.register_modify_watch()."""

    path: Path
    signature: tuple[int, int] | None = field(default=None, repr=False)
    task: asyncio.Task[None] | None = None


class PollingNotifier:
    """Detects modifications by polling ``stat()`` from an asyncio task.

    A change in size or mtime counts as a modification. A file that
    disappears is not reported; polling continues in case it returns.
    """

    def __init__(
        self,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._poll_interval = max(MIN_POLL_INTERVAL, poll_interval)
        self._loop = loop
        self._registrations: list[PollRegistration] = []

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @staticmethod
    def _signature(path: Path) -> tuple[int, int]:
        st = path.stat()
        return st.st_size, st.st_mtime_ns

    def register_modify_watch(
        self, path: Path, callback: Callable[[], None]
    ) -> PollRegistration:
        target = Path(path)
        loop = _running_loop(self._loop, target)
        try:
            signature = self._signature(target)
        except OSError as e:
            raise NotifierRegistrationFailure(target, e) from e

        registration = PollRegistration(target, signature=signature)
        registration.task = loop.create_task(self._poll(registration, callback))
        self._registrations.append(registration)
        log.debug("Polling %s every %.2fs", target, self._poll_interval)
        return registration

    async def _poll(self, registration: PollRegistration, callback: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                current = self._signature(registration.path)
            except FileNotFoundError:
                continue
            except OSError as e:
                log.warning("Error checking %s: %s", registration.path, e)
                continue

            if current != registration.signature:
                registration.signature = current
                try:
                    callback()
                except Exception:
                    log.exception("Error in modify callback for %s", registration.path)

    def cancel(self, token: PollRegistration) -> None:
        if token in self._registrations:
            self._registrations.remove(token)
        if token.task is not None and not token.task.done():
            token.task.cancel()

    def close(self) -> None:
        for registration in list(self._registrations):
            self.cancel(registration)


def create_notifier(
    kind: str = "watchdog",
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    loop: asyncio.AbstractEventLoop | None = None,
) -> WatchdogNotifier | PollingNotifier:
    """Build a notifier by name ("watchdog" or "poll")."""
    if kind == "watchdog":
        return WatchdogNotifier(loop=loop)
    if kind == "poll":
        return PollingNotifier(poll_interval=poll_interval, loop=loop)
    raise ValueError(f"Unknown notifier kind {kind!r}, expected one of {NOTIFIER_KINDS}")
