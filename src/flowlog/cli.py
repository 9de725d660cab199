"""CLI interface for flowlog."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import typer
from rich.console import Console
from rich.markup import escape

from flowlog.config import FlowlogConfig, load_config, merge_cli_overrides
from flowlog.discovery import find_journal_files, parse_date_arg
from flowlog.errors import JournalReadError
from flowlog.events import get_event_summary, sessions_to_calendar_events
from flowlog.models import Session
from flowlog.parsers.journal import parse_journal_file
from flowlog.reconstruct import reconstruct_all_sessions

app = typer.Typer(
    name="flowlog",
    help="Extract working sessions from work journals.",
)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from flowlog import __version__

        console.print(f"flowlog {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Flowlog - turn work journal sessions into timed flow events."""
    pass


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

FileArg = Annotated[
    Optional[Path],
    typer.Argument(help="Journal file to process (YYYY-MM-DD.md)."),
]
DirOption = Annotated[
    Optional[Path],
    typer.Option("--dir", "-d", help="Directory of YYYY-MM-DD.md journal files."),
]
FromOption = Annotated[
    Optional[str],
    typer.Option("--from", help="Only journals on or after this date (YYYY-MM-DD)."),
]
ToOption = Annotated[
    Optional[str],
    typer.Option("--to", help="Only journals on or before this date (YYYY-MM-DD)."),
]
RepoOption = Annotated[
    Optional[str],
    typer.Option("--repo", "-r", help="Git repository used to time sessions from commits."),
]
NoCommitsOption = Annotated[
    bool,
    typer.Option("--no-commits", help="Skip commit-based timing reconstruction."),
]
TimezoneOption = Annotated[
    Optional[str],
    typer.Option("--timezone", "-z", help="Default IANA timezone for annotations."),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a .flowlog.toml config file."),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Print machine-readable JSON."),
]


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


def _resolve_files(
    file: Path | None,
    directory: Path | None,
    from_date: date | None,
    to_date: date | None,
    config: FlowlogConfig,
    quiet: bool,
) -> list[Path]:
    if file is not None:
        if not file.is_file():
            raise _fail(f"File not found: {file}")
        return [file]

    scan_dir = directory or Path(config.journal.directory).expanduser()
    if not scan_dir.is_dir():
        raise _fail(f"Directory not found: {scan_dir}")

    files = find_journal_files(scan_dir, from_date, to_date)
    if not quiet:
        console.print(f"Found {len(files)} journal file(s) in {escape(str(scan_dir))}")
    return files


def _collect_sessions(
    file: Path | None,
    directory: Path | None,
    from_: str | None,
    to: str | None,
    repo: str | None,
    no_commits: bool,
    timezone: str | None,
    config_path: Path | None,
    quiet: bool = False,
) -> list[Session]:
    """Load config, parse the selected journals, and reconstruct timing."""
    try:
        from_date = parse_date_arg(from_, "--from") if from_ else None
        to_date = parse_date_arg(to, "--to") if to else None
    except ValueError as exc:
        raise _fail(str(exc)) from None

    config = merge_cli_overrides(
        load_config(config_path),
        repo_path=repo,
        timezone=timezone,
        use_commits=False if no_commits else None,
    )
    try:
        ZoneInfo(config.journal.timezone)
    except (ValueError, ZoneInfoNotFoundError):
        raise _fail(f"Unknown timezone: {config.journal.timezone}") from None

    sessions: list[Session] = []
    for path in _resolve_files(file, directory, from_date, to_date, config, quiet):
        try:
            sessions.extend(parse_journal_file(path, timezone=config.journal.timezone))
        except JournalReadError as exc:
            raise _fail(str(exc)) from None

    if config.timing.use_commits:
        sessions = reconstruct_all_sessions(sessions, config.to_reconstruct_config())
    return sessions


def _clock(value: datetime, zone: str) -> str:
    try:
        value = value.astimezone(ZoneInfo(zone))
    except (ValueError, ZoneInfoNotFoundError):
        pass
    return value.strftime("%H:%M")


def format_session(session: Session) -> str:
    """Multi-line plain-text description of a session."""
    lines = [
        f"Session {session.session_number}: {session.theme}",
        f"  Project: {session.project}",
    ]

    if session.start_time and session.end_time:
        start = _clock(session.start_time, session.timezone)
        end = _clock(session.end_time, session.timezone)
        lines.append(f"  Time: {start}-{end} ({session.timing_source})")
    else:
        lines.append("  Time: (no annotation)")

    if session.commits:
        lines.append(f"  Commits: {len(session.commits)} ({', '.join(session.commits)})")
    else:
        lines.append("  Commits: 0")

    lines.append(f"  Outcomes: {len(session.outcomes)} items")
    if session.learnings:
        plural = "s" if len(session.learnings) > 1 else ""
        lines.append(f"  Learnings: {len(session.learnings)} item{plural}")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command(name="sessions")
def sessions_cmd(
    file: FileArg = None,
    directory: DirOption = None,
    from_: FromOption = None,
    to: ToOption = None,
    repo: RepoOption = None,
    no_commits: NoCommitsOption = False,
    timezone: TimezoneOption = None,
    config_path: ConfigOption = None,
    as_json: JsonOption = False,
) -> None:
    """Parse journals and print their sessions with resolved timing."""
    sessions = _collect_sessions(
        file, directory, from_, to, repo, no_commits, timezone, config_path, quiet=as_json
    )

    if as_json:
        typer.echo(json.dumps([s.model_dump(mode="json") for s in sessions], indent=2))
        return

    if not sessions:
        console.print("[yellow]No sessions found.[/yellow]")
        raise typer.Exit(0)

    console.print(f"[green]Parsed {len(sessions)} session(s)[/green]")

    current_source: str | None = None
    for session in sessions:
        if session.source_file != current_source:
            current_source = session.source_file
            console.print()
            console.print(f"[bold]{session.date}:[/bold] {escape(Path(current_source).name)}")
        console.print(escape(format_session(session)))

    timed = sum(1 for s in sessions if s.has_timing)
    console.print()
    console.print(f"{timed} of {len(sessions)} session(s) have timing")


@app.command(name="events")
def events_cmd(
    file: FileArg = None,
    directory: DirOption = None,
    from_: FromOption = None,
    to: ToOption = None,
    repo: RepoOption = None,
    no_commits: NoCommitsOption = False,
    timezone: TimezoneOption = None,
    config_path: ConfigOption = None,
    as_json: JsonOption = False,
) -> None:
    """Preview the calendar events that timed sessions would produce (dry run)."""
    sessions = _collect_sessions(
        file, directory, from_, to, repo, no_commits, timezone, config_path, quiet=as_json
    )
    events, skipped = sessions_to_calendar_events(sessions)

    if as_json:
        typer.echo(json.dumps([e.to_api_dict() for e in events], indent=2))
        return

    console.print(escape(get_event_summary(events)))
    if skipped:
        console.print(
            f"[yellow]Skipped {len(skipped)} session(s) without timing:[/yellow]"
        )
        for session in skipped:
            console.print(
                f"  - {session.date} Session {session.session_number}: {escape(session.theme)}"
            )
    console.print()
    console.print("(dry-run mode - no calendar events created)")


if __name__ == "__main__":
    app()
