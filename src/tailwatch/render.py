"""Terminal rendering of watcher statuses with rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from tailwatch.watching.types import Level, Status

_LEVEL_STYLES = {
    Level.ANY: "red",
    Level.NOTICE: "cyan",
    Level.INFO: "green",
    Level.WARN: "yellow",
    Level.ALERT: "bold red",
}


class StatusRenderer:
    """Prints statuses as they arrive.

    The first status of a watcher prints its whole window; later ones print
    only lines not shown yet (by sequence number), so the output reads like
    ``tail -f``. Failures print their description in red.
    """

    def __init__(self, console: Console | None = None, show_headers: bool = True) -> None:
        self.console = console or Console(highlight=False)
        self.show_headers = show_headers
        self._last_sequence: dict[int, int] = {}
        self._last_watcher: int | None = None

    def __call__(self, status: Status) -> None:
        self.render(status)

    def render(self, status: Status) -> None:
        key = id(status.watcher)
        style = _LEVEL_STYLES.get(status.level, "white")

        if status.level is Level.ANY:
            self.console.print(f"[{style}]{escape(status.description)}[/{style}]")
            self._last_watcher = None
            return

        seen = self._last_sequence.get(key, 0)
        fresh = [item for item in status.items if item.sequence > seen]
        if status.items:
            self._last_sequence[key] = max(item.sequence for item in status.items)

        if self.show_headers and self._last_watcher != key:
            self.console.print(f"[bold {style}]==> {escape(status.description)} <==[/bold {style}]")
        self._last_watcher = key

        for item in fresh:
            self.console.print(escape(item.content))
