"""Tests for the tailwatch command line."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from tailwatch import cli
from tailwatch.cli import build_overrides, cli_watchers, create_parser, run_cli


class TestParser:
    def test_defaults(self) -> None:
        parsed = create_parser().parse_args([])
        assert parsed.files == []
        assert parsed.lines == 10
        assert parsed.verbose is None
        assert parsed.notifier is None
        assert not parsed.reverse

    def test_file_options(self) -> None:
        parsed = create_parser().parse_args(
            ["-n", "5", "--exclude", "cron", "-i", "--reverse", "/var/log/messages"]
        )
        assert parsed.files == [Path("/var/log/messages")]
        assert parsed.lines == 5
        assert parsed.exclude == "cron"
        assert parsed.ignore_case
        assert parsed.reverse

    def test_unknown_notifier_rejected(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--notifier", "fanotify"])


class TestBuildOverrides:
    def test_empty(self) -> None:
        assert build_overrides(create_parser().parse_args([])) == {}

    def test_verbose_and_notifier(self) -> None:
        parsed = create_parser().parse_args(["-vv", "--notifier", "poll", "--poll-interval", "0.2"])
        assert build_overrides(parsed) == {
            "logging": {"verbose": 4},
            "notifier": {"kind": "poll", "poll_interval": 0.2},
        }

    def test_verbose_capped(self) -> None:
        parsed = create_parser().parse_args(["-vvvvvv"])
        assert build_overrides(parsed)["logging"]["verbose"] == 4


class TestCliWatchers:
    def test_one_entry_per_file(self) -> None:
        parsed = create_parser().parse_args(["-n", "3", "--include", "ERR", "a.log", "b.log"])
        entries = cli_watchers(parsed)
        assert [e["file"] for e in entries] == ["a.log", "b.log"]
        assert all(e["lines_number"] == 3 and e["include"] == "ERR" for e in entries)


class FakeEngine:
    """Stands in for Engine so run_cli() returns immediately."""

    instances: list[FakeEngine] = []

    def __init__(self, config: Any, on_status: Any = None) -> None:
        self.config = config
        self.on_status = on_status
        FakeEngine.instances.append(self)

    async def run_forever(self) -> None:
        return None


class TestRunCli:
    @pytest.fixture(autouse=True)
    def fake_engine(self, monkeypatch: pytest.MonkeyPatch) -> None:
        FakeEngine.instances = []
        monkeypatch.setattr(cli, "Engine", FakeEngine)
        monkeypatch.setattr(cli, "setup_logging", lambda config: None)

    def test_no_files(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_cli([]) == 1
        assert "usage:" in capsys.readouterr().out
        assert FakeEngine.instances == []

    def test_missing_config_file(self, tmp_path: Path) -> None:
        assert run_cli(["--config", str(tmp_path / "nope.yaml")]) == 2

    def test_bad_lines(self, tmp_path: Path) -> None:
        assert run_cli(["-n", "0", str(tmp_path / "a.log")]) == 2

    def test_bad_pattern(self, tmp_path: Path) -> None:
        assert run_cli(["--include", "(", str(tmp_path / "a.log")]) == 2

    def test_files_and_config_combined(self, tmp_path: Path) -> None:
        config_file = tmp_path / "watch.yaml"
        config_file.write_text("watchers:\n  - file: /var/log/messages\n    lines_number: 4\n")

        assert run_cli(["--config", str(config_file), "-n", "2", str(tmp_path / "a.log")]) == 0

        (engine,) = FakeEngine.instances
        watchers = engine.config.watchers
        assert [w.file for w in watchers] == ["/var/log/messages", str(tmp_path / "a.log")]
        assert [w.lines_number for w in watchers] == [4, 2]
        assert engine.on_status is not None

    def test_notifier_option(self, tmp_path: Path) -> None:
        assert run_cli(["--notifier", "poll", str(tmp_path / "a.log")]) == 0
        assert FakeEngine.instances[0].config.notifier.kind == "poll"
