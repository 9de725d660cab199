"""Pure data models for journal sessions and commit timing.

All Pydantic models and enums live here. No I/O, no parsing logic.
Parsers and the timing reconstructor import from this module.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_TIMEZONE = "America/Los_Angeles"
NO_THEME = "(no theme)"
DEFAULT_PROJECT = "General"
UNKNOWN_DATE = "unknown"


class TimingSource(StrEnum):
    """How a session's start/end times were determined."""

    ANNOTATION = "annotation"
    COMMITS = "commits"
    INFERRED = "inferred"


class Session(BaseModel):
    """A single working session extracted from a journal document.

    Frozen: timing is changed only by building a new record with
    ``model_copy``, so the start/end pairing cannot be broken after
    construction.
    """

    model_config = ConfigDict(frozen=True)

    date: str = UNKNOWN_DATE
    session_number: int = Field(ge=1)
    project: str = DEFAULT_PROJECT
    theme: str = NO_THEME
    start_time: datetime | None = None
    end_time: datetime | None = None
    timezone: str = DEFAULT_TIMEZONE
    timing_source: TimingSource = TimingSource.INFERRED
    commits: list[str] = Field(default_factory=list)
    outcomes: list[str] = Field(default_factory=list)
    learnings: list[str] = Field(default_factory=list)
    source_file: str = ""

    @model_validator(mode="after")
    def _timing_is_paired(self) -> Session:
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must both be set or both be unset")
        return self

    @property
    def has_timing(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def duration_minutes(self) -> int | None:
        """Whole minutes between start and end, or None without timing."""
        if self.start_time is None or self.end_time is None:
            return None
        return round((self.end_time - self.start_time).total_seconds() / 60)


class CommitTimestamp(BaseModel):
    """Resolved timestamp for one requested (possibly abbreviated) commit."""

    hash: str
    timestamp: datetime
    timezone: str = DEFAULT_TIMEZONE


class SessionTimeRange(BaseModel):
    """Earliest/latest commit instants for a session.

    ``timezone`` is the zone of the earliest commit. An empty range has
    both bounds set to None and carries the default zone.
    """

    earliest: datetime | None = None
    latest: datetime | None = None
    timezone: str = DEFAULT_TIMEZONE

    @property
    def is_empty(self) -> bool:
        return self.earliest is None or self.latest is None
