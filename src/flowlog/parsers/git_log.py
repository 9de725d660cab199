"""Resolve commit references to timestamps from a local git repository.

A single ``git log --all`` query enumerates every reachable commit; the
requested (possibly abbreviated) hashes are then matched by prefix.
Repository failures never propagate: they are logged and produce an empty
result so callers simply get less timing information.
"""

from __future__ import annotations

import logging
import subprocess
from datetime import datetime, timedelta
from pathlib import Path
from typing import Protocol

from flowlog.models import DEFAULT_TIMEZONE, CommitTimestamp, SessionTimeRange

logger = logging.getLogger(__name__)

GIT_LOG_CMD = ["git", "log", "--format=%H %aI", "--all"]

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


# ---------------------------------------------------------------------------
# Offset -> timezone strategy
# ---------------------------------------------------------------------------


class OffsetZoneResolver(Protocol):
    """Maps a UTC offset like ``-08:00`` to candidate IANA zone names."""

    def candidates(self, offset: str) -> list[str]:
        """Return candidate zones, best guess first. Empty when unknown."""
        ...


# One offset can stand for several zones; the first candidate is used.
COMMON_OFFSETS: dict[str, list[str]] = {
    "-08:00": ["America/Los_Angeles"],
    "-07:00": ["America/Denver", "America/Los_Angeles"],
    "-06:00": ["America/Chicago", "America/Denver"],
    "-05:00": ["America/New_York", "America/Chicago"],
    "-04:00": ["America/New_York"],
    "+00:00": ["UTC", "Europe/London"],
    "+01:00": ["Europe/London"],
}


class StaticOffsetTable:
    """Offset lookup backed by a fixed table of common US/UK offsets."""

    def __init__(self, table: dict[str, list[str]] | None = None) -> None:
        self._table = COMMON_OFFSETS if table is None else table

    def candidates(self, offset: str) -> list[str]:
        return list(self._table.get(offset, []))


def format_offset(offset: timedelta) -> str:
    """Render a UTC offset as ``+HH:MM`` / ``-HH:MM``."""
    total_minutes = int(offset.total_seconds() // 60)
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def zone_for_offset(
    offset: str,
    resolver: OffsetZoneResolver,
    default: str = DEFAULT_TIMEZONE,
) -> str:
    candidates = resolver.candidates(offset)
    return candidates[0] if candidates else default


# ---------------------------------------------------------------------------
# git log output
# ---------------------------------------------------------------------------


def parse_git_log(
    output: str,
    *,
    zone_resolver: OffsetZoneResolver | None = None,
    default_timezone: str = DEFAULT_TIMEZONE,
) -> dict[str, CommitTimestamp]:
    """Parse ``<full-hash> <ISO-8601 timestamp>`` lines.

    Returns a mapping of full hash to CommitTimestamp, in log order.
    Blank or malformed lines are skipped.
    """
    resolver = zone_resolver or StaticOffsetTable()
    commits: dict[str, CommitTimestamp] = {}

    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        full_hash, iso_timestamp = parts[0], parts[1]
        if not set(full_hash) <= _HEX_DIGITS:
            continue
        try:
            timestamp = datetime.fromisoformat(iso_timestamp)
        except ValueError:
            continue

        offset = timestamp.utcoffset()
        if offset is None:
            continue
        timezone = zone_for_offset(format_offset(offset), resolver, default_timezone)
        commits[full_hash] = CommitTimestamp(hash=full_hash, timestamp=timestamp, timezone=timezone)

    return commits


def _run_git_log(repo_path: str | Path) -> str | None:
    """Run the history query in *repo_path*; None on any failure."""
    logger.debug("Running %s in %s", " ".join(GIT_LOG_CMD), repo_path)
    try:
        result = subprocess.run(
            GIT_LOG_CMD,
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.warning("Failed to get commit timestamps from %s: %s", repo_path, exc)
        return None

    if result.returncode != 0:
        logger.warning(
            "Failed to get commit timestamps from %s (git exit %d): %s",
            repo_path,
            result.returncode,
            result.stderr.strip()[:500],
        )
        return None

    return result.stdout


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_commit_timestamps(
    commits: list[str],
    repo_path: str | Path,
    *,
    zone_resolver: OffsetZoneResolver | None = None,
    default_timezone: str = DEFAULT_TIMEZONE,
) -> dict[str, CommitTimestamp]:
    """Resolve commit references against the repository at *repo_path*.

    Each reference is matched case-insensitively as a prefix of a full
    hash. When several full hashes share a prefix, the first one in
    ``git log`` order wins; that order is not guaranteed stable, so
    prefixes are expected to be unique.

    Args:
        commits: Full or abbreviated hashes. Not mutated.
        repo_path: Repository working directory.
        zone_resolver: Offset-to-zone strategy; defaults to StaticOffsetTable.
        default_timezone: Zone used for unknown offsets.

    Returns:
        Mapping of each resolvable reference, as given, to its timestamp.
        Empty if nothing resolves or the repository cannot be read.
    """
    if not commits:
        return {}

    output = _run_git_log(repo_path)
    if output is None:
        return {}

    known = parse_git_log(
        output, zone_resolver=zone_resolver, default_timezone=default_timezone
    )
    lowered = [(full_hash.lower(), entry) for full_hash, entry in known.items()]

    resolved: dict[str, CommitTimestamp] = {}
    for requested in commits:
        prefix = requested.lower()
        if not prefix:
            continue
        for full_hash, entry in lowered:
            if full_hash.startswith(prefix):
                resolved[requested] = CommitTimestamp(
                    hash=requested, timestamp=entry.timestamp, timezone=entry.timezone
                )
                break

    logger.info(
        "Resolved %d of %d commit reference(s) in %s", len(resolved), len(commits), repo_path
    )
    return resolved


def get_session_time_range(
    timestamps: dict[str, CommitTimestamp],
    *,
    default_timezone: str = DEFAULT_TIMEZONE,
) -> SessionTimeRange:
    """Earliest and latest resolved instants, with the earliest commit's zone."""
    if not timestamps:
        return SessionTimeRange(timezone=default_timezone)

    earliest = min(timestamps.values(), key=lambda c: c.timestamp)
    latest = max(timestamps.values(), key=lambda c: c.timestamp)
    return SessionTimeRange(
        earliest=earliest.timestamp,
        latest=latest.timestamp,
        timezone=earliest.timezone,
    )
