"""Configuration schema dataclasses for tailwatch.

All sections have defaults so partial configs from several files merge
together cleanly.

Example config.yaml:
    logging:
      level: info
      file: ~/.tailwatch/tailwatch.log
    notifier:
      kind: watchdog        # or "poll"
      poll_interval: 1.0
    watchers:
      - file: /var/log/messages
        lines_number: 10
        exclude: '\\scron'
      - file: /var/log/nginx/error.log
        lines_number: 5
        include: 'error|crit'
        ignore_case: true
        reverse: true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tailwatch.watching.filters import build_filter
from tailwatch.watching.types import EmitOrder, WatchSpec

DEFAULT_LINES_NUMBER = 10


@dataclass
class FileTailConfig:
    """One file to tail.

    ``include``/``exclude`` are regular expressions searched anywhere in a
    line. ``reverse`` puts the newest line first.
    """

    file: str
    lines_number: int = DEFAULT_LINES_NUMBER
    include: str | None = None
    exclude: str | None = None
    ignore_case: bool = False
    reverse: bool = False
    description: str | None = None

    def to_watch_spec(self) -> WatchSpec:
        """Build the immutable spec a FileTailWatcher runs from."""
        return WatchSpec(
            path=Path(self.file).expanduser(),
            window_size=self.lines_number,
            filter=build_filter(self.include, self.exclude, self.ignore_case),
            emit_order=EmitOrder.NEWEST_FIRST if self.reverse else EmitOrder.NEWEST_LAST,
            description=self.description,
        )


@dataclass
class NotifierConfig:
    """How file modifications are detected."""

    kind: str = "watchdog"  # "watchdog" or "poll"
    poll_interval: float = 1.0  # Seconds, "poll" only


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level
    file: str | None = None  # Log file path


@dataclass
class Config:
    """Root configuration object."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    notifier: NotifierConfig = field(default_factory=NotifierConfig)
    watchers: list[FileTailConfig] = field(default_factory=list)

    # Unknown top-level sections, kept for forward compatibility
    extra: dict[str, Any] = field(default_factory=dict)
