"""Work journal parser.

Turns a markdown journal document into an ordered list of ``Session``
records. Parsing is total: malformed or missing structure degrades to
documented defaults instead of raising.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flowlog.errors import JournalReadError
from flowlog.models import (
    DEFAULT_PROJECT,
    DEFAULT_TIMEZONE,
    NO_THEME,
    UNKNOWN_DATE,
    Session,
    TimingSource,
)
from flowlog.parsers.markdown import (
    COMMIT_REF,
    DATE_IN_NAME,
    SESSION_BOUNDARY,
    SESSION_HEADING,
    SESSION_THEME,
    TIME_ANNOTATION,
    TOP_HEADING_DATE,
    TOP_HEADING_PROJECT,
    extract_list_items,
    extract_section,
)

logger = logging.getLogger(__name__)

OUTCOMES_SECTION = "What I Worked On"
LEARNINGS_SECTION = "Learnings"


# ---------------------------------------------------------------------------
# Document-level metadata
# ---------------------------------------------------------------------------


def extract_date(text: str, file_name: str) -> str:
    """Date from the file name, else from the top heading, else ``unknown``."""
    match = DATE_IN_NAME.search(Path(file_name).name)
    if match:
        return match.group("date")
    match = TOP_HEADING_DATE.search(text)
    return match.group("date") if match else UNKNOWN_DATE


def extract_project(text: str) -> str:
    """Project segment of ``# YYYY-MM-DD: Project - Details``."""
    match = TOP_HEADING_PROJECT.search(text)
    if match:
        project = match.group("project").strip()
        if project:
            return project
    return DEFAULT_PROJECT


def split_sessions(text: str) -> list[str]:
    """Split a document at each ``## Session N`` heading.

    The heading line stays with the block that follows it. Anything
    before the first session heading is dropped, so a document without
    session headings yields no blocks.
    """
    return [part for part in SESSION_BOUNDARY.split(text) if SESSION_HEADING.search(part)]


# ---------------------------------------------------------------------------
# Session-level fields
# ---------------------------------------------------------------------------


def extract_session_number(block: str) -> int | None:
    match = SESSION_HEADING.search(block)
    if not match:
        return None
    try:
        number = int(match.group("number"))
    except ValueError:
        return None
    return number if number > 0 else None


def extract_theme(block: str) -> str:
    match = SESSION_THEME.search(block)
    return match.group("theme").strip() if match else NO_THEME


def extract_commits(block: str) -> list[str]:
    """Backticked hex tokens (7-40 chars), de-duplicated in first-seen order."""
    return list(dict.fromkeys(m.group("hash") for m in COMMIT_REF.finditer(block)))


def extract_time_annotation(
    block: str,
    session_date: str,
    timezone: str = DEFAULT_TIMEZONE,
) -> tuple[datetime, datetime] | None:
    """Resolve ``<!-- session-time: HH:MM-HH:MM -->`` on *session_date*.

    Times are wall-clock values in *timezone*. Returns None when there is
    no annotation, or when the date or a clock value cannot be interpreted.
    Both clock values use the same date, so a range crossing midnight
    yields an end before its start.
    """
    match = TIME_ANNOTATION.search(block)
    if not match:
        return None

    try:
        day = date.fromisoformat(session_date)
        tz = ZoneInfo(timezone)
        start = time.fromisoformat(match.group("start"))
        end = time.fromisoformat(match.group("end"))
    except (ValueError, ZoneInfoNotFoundError):
        logger.debug(
            "Ignoring unusable session-time annotation %r on %s",
            match.group(0),
            session_date,
        )
        return None

    return datetime.combine(day, start, tzinfo=tz), datetime.combine(day, end, tzinfo=tz)


def build_session(
    block: str,
    *,
    position: int,
    session_date: str,
    project: str,
    source_file: str,
    timezone: str = DEFAULT_TIMEZONE,
) -> Session:
    """Assemble a Session from one ``## Session N`` block.

    Args:
        block: Session text, heading line included.
        position: 1-based position of the block within its document.
        session_date: Document date (``YYYY-MM-DD`` or ``unknown``).
        project: Document project label.
        source_file: Originating path, stored unmodified.
        timezone: Zone used to interpret time annotations.
    """
    timing = extract_time_annotation(block, session_date, timezone)
    start_time, end_time = timing if timing else (None, None)

    return Session(
        date=session_date,
        session_number=extract_session_number(block) or position,
        project=project,
        theme=extract_theme(block),
        start_time=start_time,
        end_time=end_time,
        timezone=timezone,
        timing_source=TimingSource.ANNOTATION if timing else TimingSource.INFERRED,
        commits=extract_commits(block),
        outcomes=extract_list_items(extract_section(block, OUTCOMES_SECTION)),
        learnings=extract_list_items(extract_section(block, LEARNINGS_SECTION)),
        source_file=source_file,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_journal(
    text: str,
    file_name: str,
    *,
    timezone: str = DEFAULT_TIMEZONE,
) -> list[Session]:
    """Parse journal *text* into sessions in order of appearance.

    Args:
        text: Full markdown document.
        file_name: Path or name of the document; used for the date and
            recorded as ``source_file``.
        timezone: Default zone for sessions and their time annotations.

    Returns:
        One Session per ``## Session N`` block; empty when there are none.
    """
    session_date = extract_date(text, file_name)
    project = extract_project(text)

    sessions = [
        build_session(
            block,
            position=index,
            session_date=session_date,
            project=project,
            source_file=file_name,
            timezone=timezone,
        )
        for index, block in enumerate(split_sessions(text), start=1)
    ]
    logger.debug("Parsed %d session(s) from %s", len(sessions), file_name)
    return sessions


def parse_journal_file(path: str | Path, *, timezone: str = DEFAULT_TIMEZONE) -> list[Session]:
    """Read a journal file from disk and parse it.

    Raises:
        JournalReadError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise JournalReadError(f"Cannot read journal file {path}: {exc}") from exc
    return parse_journal(text, str(path), timezone=timezone)
