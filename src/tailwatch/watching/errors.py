"""Exceptions raised while starting or running a file tail."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class TailWatchError(Exception):
    """Base class for tailwatch errors."""


@dataclass
class FileUnavailable(TailWatchError):
    """The watched file is missing or cannot be opened for reading."""

    path: Path
    error: OSError

    def __str__(self) -> str:
        return self.error.strerror or str(self.error)


@dataclass
class NotifierRegistrationFailure(TailWatchError):
    """The filesystem event subsystem refused to watch the path.

    Typical causes are exhausted inotify watches or an unsupported path.
    """

    path: Path
    error: BaseException

    def __str__(self) -> str:
        return f"cannot watch {self.path}: {self.error}"
