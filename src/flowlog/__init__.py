"""Extract work sessions from markdown journals and reconstruct their timing.

Two-phase pipeline: deterministic journal parsing (text → Session records)
followed by timing reconstruction from annotations or git commit history.
"""

from flowlog.models import (
    DEFAULT_TIMEZONE,
    CommitTimestamp,
    Session,
    SessionTimeRange,
    TimingSource,
)
from flowlog.parsers.git_log import get_commit_timestamps, get_session_time_range
from flowlog.parsers.journal import parse_journal, parse_journal_file
from flowlog.reconstruct import (
    ReconstructConfig,
    reconstruct_all_sessions,
    reconstruct_session_timing,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TIMEZONE",
    "CommitTimestamp",
    "ReconstructConfig",
    "Session",
    "SessionTimeRange",
    "TimingSource",
    "get_commit_timestamps",
    "get_session_time_range",
    "parse_journal",
    "parse_journal_file",
    "reconstruct_all_sessions",
    "reconstruct_session_timing",
]
