"""Value types shared by watchers, the engine and renderers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tailwatch.watching.protocol import Watcher

LineFilter = Callable[[str], bool]


def accept_all(line: str) -> bool:
    """Default line filter: keep everything."""
    return True


class EmitOrder(Enum):
    """Which end of the window receives new lines.

    - NEWEST_LAST: chronological, like ``tail``
    - NEWEST_FIRST: reverse-chronological, new lines on top
    """

    NEWEST_LAST = "newest_last"
    NEWEST_FIRST = "newest_first"

    def __str__(self) -> str:
        return self.value


class Level(IntEnum):
    """Status severity, lowest first."""

    ANY = 0
    NOTICE = 1
    INFO = 2
    WARN = 3
    ALERT = 4

    def __str__(self) -> str:
        return self.name.lower()


class WatcherState(Enum):
    """Lifecycle of a watcher instance. FAILED and STOPPED are terminal."""

    CREATED = "created"
    STARTING = "starting"
    ACTIVE = "active"
    FAILED = "failed"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WatchSpec:
    """What to tail and how much of it to keep.

    Attributes:
        path: File to watch.
        window_size: Maximum number of retained lines (>= 1).
        filter: Predicate over a raw line; rejected lines are never stored.
        emit_order: Insertion side of the window.
        description: Optional label; defaults to ``FileWatcher [<path>]``.
    """

    path: Path
    window_size: int
    filter: LineFilter = accept_all
    emit_order: EmitOrder = EmitOrder.NEWEST_LAST
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.path, Path):
            object.__setattr__(self, "path", Path(self.path))
        if self.window_size < 1:
            raise ValueError(f"window_size must be positive, got {self.window_size}")


@dataclass(frozen=True, slots=True)
class LogLine:
    """One accepted line and its discovery order within a watcher."""

    content: str
    sequence: int

    def __str__(self) -> str:
        return self.content


class Status:
    """A point-in-time report from a watcher.

    The description is computed on first access, so callers that drop a
    status never pay for formatting it.
    """

    __slots__ = ("watcher", "level", "items", "_describe", "_description")

    def __init__(
        self,
        watcher: Watcher,
        level: Level,
        description: Callable[[], str] | str,
        items: tuple[LogLine, ...] = (),
    ) -> None:
        self.watcher = watcher
        self.level = level
        self.items = tuple(items)
        if callable(description):
            self._describe: Callable[[], str] | None = description
            self._description: str | None = None
        else:
            self._describe = None
            self._description = description

    @property
    def description(self) -> str:
        if self._description is None and self._describe is not None:
            self._description = self._describe()
            self._describe = None
        return self._description or ""

    @property
    def lines(self) -> list[str]:
        return [item.content for item in self.items]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging and rendering."""
        return {
            "watcher": self.watcher.describe(),
            "level": str(self.level),
            "description": self.description,
            "items": [{"content": i.content, "sequence": i.sequence} for i in self.items],
        }

    def __repr__(self) -> str:
        return f"<Status {self.level} {self.description!r} items={len(self.items)}>"
