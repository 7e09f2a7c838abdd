"""Shared test utilities for tailwatch tests."""

from __future__ import annotations

import asyncio
import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from tailwatch.watching.errors import NotifierRegistrationFailure
from tailwatch.watching.types import Status


@dataclass
class StatusLog:
    """Status callback that records everything it receives."""

    statuses: list[Status] = field(default_factory=list)

    def __call__(self, status: Status) -> None:
        self.statuses.append(status)

    def __len__(self) -> int:
        return len(self.statuses)

    @property
    def last(self) -> Status:
        return self.statuses[-1]


class FakeNotifier:
    """In-process ChangeNotifier: tests decide when a file "changed".

    Callbacks run synchronously from fire(), which is what the real
    notifiers guarantee too (delivery on the loop thread, one at a time).
    """

    def __init__(self, fail_with: BaseException | None = None) -> None:
        self.fail_with = fail_with
        self.registrations: dict[int, tuple[Path, Callable[[], None]]] = {}
        self.register_calls = 0
        self.cancelled: list[int] = []
        self.closed = False
        self._tokens = itertools.count(1)

    def register_modify_watch(self, path: Path, callback: Callable[[], None]) -> int:
        self.register_calls += 1
        if self.fail_with is not None:
            raise NotifierRegistrationFailure(Path(path), self.fail_with)
        token = next(self._tokens)
        self.registrations[token] = (Path(path), callback)
        return token

    def cancel(self, token: int) -> None:
        self.cancelled.append(token)
        self.registrations.pop(token, None)

    def close(self) -> None:
        for token in list(self.registrations):
            self.cancel(token)
        self.closed = True

    def callback_for(self, path: Path) -> Callable[[], None]:
        for registered, callback in self.registrations.values():
            if registered == Path(path):
                return callback
        raise KeyError(path)

    def fire(self, path: Path | None = None) -> None:
        for registered, callback in list(self.registrations.values()):
            if path is None or registered == Path(path):
                callback()


def append(path: Path, text: str) -> None:
    """Append ``text`` to ``path`` the way a logger would."""
    with open(path, "a", encoding="utf-8", newline="") as f:
        f.write(text)


def write_lines(path: Path, lines: list[str]) -> Path:
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


async def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Yield to the loop until ``predicate()`` holds or fail after ``timeout``."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError(f"condition not met within {timeout}s")
        await asyncio.sleep(0.02)
