"""Locate dated journal files in a directory."""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path

JOURNAL_FILENAME = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})\.md$")


def parse_date_arg(value: str, flag: str = "--from") -> date:
    """Parse a ``YYYY-MM-DD`` command line value.

    Raises:
        ValueError: With a message naming *flag* when the value is invalid.
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(
            f"Invalid {flag} date format: {value!r} (use YYYY-MM-DD, e.g. 2026-01-15)"
        ) from None


def journal_date(path: Path) -> date | None:
    """Date encoded in a ``YYYY-MM-DD.md`` file name, if any."""
    match = JOURNAL_FILENAME.match(path.name)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group("date"))
    except ValueError:
        return None


def find_journal_files(
    directory: Path,
    from_date: date | None = None,
    to_date: date | None = None,
) -> list[Path]:
    """Journal files directly in *directory*, oldest first.

    Args:
        directory: Directory to scan (not recursive).
        from_date: Inclusive lower bound; None for no bound.
        to_date: Inclusive upper bound; None for no bound.

    Returns:
        Paths named ``YYYY-MM-DD.md`` within the range, sorted by date.
    """
    if not directory.is_dir():
        return []

    dated: list[tuple[date, Path]] = []
    for path in directory.iterdir():
        if not path.is_file():
            continue
        day = journal_date(path)
        if day is None:
            continue
        if from_date and day < from_date:
            continue
        if to_date and day > to_date:
            continue
        dated.append((day, path))

    return [path for _, path in sorted(dated)]
