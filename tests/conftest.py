"""Root pytest configuration for all tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from tailwatch.logging import reset_logging
from tests.utils import FakeNotifier, StatusLog


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's real config and env out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("TAILWATCH_LOG", raising=False)
    monkeypatch.delenv("TAILWATCH_NOTIFIER", raising=False)


@pytest.fixture(autouse=True)
def clean_logging() -> Iterator[None]:
    """Undo setup_logging() between tests."""
    yield
    reset_logging()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def statuses() -> StatusLog:
    return StatusLog()
