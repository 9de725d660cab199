"""Smoke tests for the CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from flowlog.cli import app, format_session
from flowlog.models import Session

JOURNAL = """# 2026-01-15: Calendar Automaton - TypeScript Fixes

## Session 1: Orientation

### What I Worked On
- Read the code

## Session 2: Strict Mode Fixes
<!-- session-time: 10:30-12:45 -->

### What I Worked On
1. **Installed Zod**
2. Fixed errors

### Learnings
- Zod safeParse

### Commits
- `0ba4e91` Fix strict mode errors
"""


def _dated_journal(day: str) -> str:
    return f"# {day}: Test Project\n\n## Session 1: Test Session\n\n### What I Worked On\n- Did something\n"


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for var in ("FLOWLOG_JOURNAL_DIR", "FLOWLOG_TIMEZONE", "FLOWLOG_REPO_PATH"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("flowlog.config.GLOBAL_CONFIG", tmp_path / "no-global.toml")
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def journal_file(tmp_path: Path) -> Path:
    path = tmp_path / "2026-01-15.md"
    path.write_text(JOURNAL, encoding="utf-8")
    return path


@pytest.fixture
def journal_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "journals"
    directory.mkdir()
    for day in ("2025-12-01", "2025-12-15", "2026-01-01", "2026-01-15"):
        (directory / f"{day}.md").write_text(_dated_journal(day), encoding="utf-8")
    (directory / "notes.md").write_text("# Just some notes\n", encoding="utf-8")
    return directory


class TestCLI:
    """Tests for top-level CLI options."""

    def test_main_help(self, runner: CliRunner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "sessions" in result.output
        assert "events" in result.output

    def test_version(self, runner: CliRunner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "flowlog 0.1.0" in result.output


class TestSessionsCommand:
    """Tests for the sessions command."""

    def test_single_file(self, runner: CliRunner, journal_file: Path):
        result = runner.invoke(app, ["sessions", str(journal_file), "--no-commits"])
        assert result.exit_code == 0, result.output
        assert "Parsed 2 session(s)" in result.output
        assert "Session 1: Orientation" in result.output
        assert "Time: (no annotation)" in result.output
        assert "Time: 10:30-12:45 (annotation)" in result.output
        assert "Commits: 1 (0ba4e91)" in result.output
        assert "Learnings: 1 item" in result.output
        assert "1 of 2 session(s) have timing" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(app, ["sessions", str(tmp_path / "missing.md")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_json_output(self, runner: CliRunner, journal_file: Path):
        result = runner.invoke(app, ["sessions", str(journal_file), "--no-commits", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [s["session_number"] for s in data] == [1, 2]
        assert data[1]["timing_source"] == "annotation"
        assert data[1]["commits"] == ["0ba4e91"]
        assert data[0]["start_time"] is None

    def test_unresolvable_repo_leaves_sessions_untimed(
        self, runner: CliRunner, journal_file: Path, tmp_path: Path
    ):
        result = runner.invoke(
            app, ["sessions", str(journal_file), "--repo", str(tmp_path / "no-repo"), "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data[0]["timing_source"] == "inferred"
        assert data[1]["timing_source"] == "annotation"

    def test_directory(self, runner: CliRunner, journal_dir: Path):
        result = runner.invoke(app, ["sessions", "--dir", str(journal_dir), "--no-commits"])
        assert result.exit_code == 0, result.output
        assert "Found 4 journal file(s)" in result.output
        assert "Parsed 4 session(s)" in result.output

    def test_from_date(self, runner: CliRunner, journal_dir: Path):
        result = runner.invoke(
            app, ["sessions", "--dir", str(journal_dir), "--from", "2026-01-01", "--no-commits"]
        )
        assert result.exit_code == 0, result.output
        assert "Found 2 journal file(s)" in result.output
        assert "2026-01-01:" in result.output
        assert "2026-01-15:" in result.output
        assert "2025-12-01:" not in result.output
        assert "2025-12-15:" not in result.output

    def test_date_range(self, runner: CliRunner, journal_dir: Path):
        result = runner.invoke(
            app,
            [
                "sessions", "--dir", str(journal_dir),
                "--from", "2025-12-15", "--to", "2026-01-01", "--no-commits",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Found 2 journal file(s)" in result.output
        assert "2025-12-15:" in result.output
        assert "2026-01-01:" in result.output
        assert "2026-01-15:" not in result.output

    def test_invalid_date(self, runner: CliRunner, journal_dir: Path):
        result = runner.invoke(app, ["sessions", "--dir", str(journal_dir), "--from", "invalid-date"])
        assert result.exit_code == 1
        assert "Invalid --from date format" in result.output

    def test_invalid_timezone(self, runner: CliRunner, journal_file: Path):
        result = runner.invoke(app, ["sessions", str(journal_file), "--timezone", "Mars/Olympus"])
        assert result.exit_code == 1
        assert "Unknown timezone" in result.output

    def test_no_sessions(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "2026-01-20.md"
        path.write_text("# 2026-01-20: Notes\n\nNothing structured.\n", encoding="utf-8")
        result = runner.invoke(app, ["sessions", str(path), "--no-commits"])
        assert result.exit_code == 0
        assert "No sessions found" in result.output

    def test_config_file_directory(self, runner: CliRunner, journal_dir: Path, tmp_path: Path):
        config = tmp_path / "flowlog.toml"
        config.write_text(
            f'[journal]\ndirectory = "{journal_dir.as_posix()}"\n[timing]\nuse_commits = false\n',
            encoding="utf-8",
        )
        result = runner.invoke(app, ["sessions", "--config", str(config)])
        assert result.exit_code == 0, result.output
        assert "Found 4 journal file(s)" in result.output


class TestEventsCommand:
    """Tests for the events command."""

    def test_preview(self, runner: CliRunner, journal_file: Path):
        result = runner.invoke(app, ["events", str(journal_file), "--no-commits"])
        assert result.exit_code == 0, result.output
        assert "1 event(s) to create" in result.output
        assert "Flow: Calendar Automaton - Strict Mode Fixes" in result.output
        assert "Skipped 1 session(s) without timing" in result.output
        assert "dry-run mode" in result.output

    def test_json_payloads(self, runner: CliRunner, journal_file: Path):
        result = runner.invoke(app, ["events", str(journal_file), "--no-commits", "--json"])
        assert result.exit_code == 0, result.output
        payloads = json.loads(result.stdout)
        assert len(payloads) == 1
        assert payloads[0]["colorId"] == "5"
        assert payloads[0]["start"]["dateTime"] == "2026-01-15T18:30:00.000Z"
        assert payloads[0]["start"]["timeZone"] == "America/Los_Angeles"


class TestFormatSession:
    """Tests for format_session."""

    def test_untimed(self):
        text = format_session(Session(session_number=3, project="P", theme="T"))
        assert text.splitlines() == [
            "Session 3: T",
            "  Project: P",
            "  Time: (no annotation)",
            "  Commits: 0",
            "  Outcomes: 0 items",
        ]
