"""Parsers for work journals and git history."""

from .git_log import (
    OffsetZoneResolver,
    StaticOffsetTable,
    get_commit_timestamps,
    get_session_time_range,
    parse_git_log,
)
from .journal import parse_journal, parse_journal_file
from .markdown import clean_item, extract_list_items, extract_section

__all__ = [
    "OffsetZoneResolver",
    "StaticOffsetTable",
    "clean_item",
    "extract_list_items",
    "extract_section",
    "get_commit_timestamps",
    "get_session_time_range",
    "parse_git_log",
    "parse_journal",
    "parse_journal_file",
]
