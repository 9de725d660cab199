"""Session timing reconstruction.

Priority per session:
1. Explicit ``session-time`` annotation (already parsed, never overwritten)
2. Git commit timestamps, widened by configurable buffers
3. Nothing: the session is returned untimed
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field

from flowlog.models import DEFAULT_TIMEZONE, Session, TimingSource
from flowlog.parsers.git_log import (
    OffsetZoneResolver,
    get_commit_timestamps,
    get_session_time_range,
)

logger = logging.getLogger(__name__)


class ReconstructConfig(BaseModel):
    """Settings for one reconstruction call."""

    model_config = ConfigDict(frozen=True)

    repo_path: str = Field(default_factory=os.getcwd)
    # Reserved for a duration-based fallback; not used yet.
    default_duration_minutes: int = Field(default=60, ge=0)
    pre_commit_buffer_minutes: int = Field(default=15, ge=0)
    post_commit_buffer_minutes: int = Field(default=5, ge=0)
    default_timezone: str = DEFAULT_TIMEZONE


def reconstruct_session_timing(
    session: Session,
    config: ReconstructConfig | None = None,
    *,
    zone_resolver: OffsetZoneResolver | None = None,
) -> Session:
    """Fill in start/end times for *session* where a source is available.

    Annotated sessions are returned as-is. Otherwise the session's commit
    references are resolved against ``config.repo_path``; if any resolve,
    a copy is returned spanning the earliest commit minus the pre-buffer to
    the latest commit plus the post-buffer, tagged ``commits``. If none
    resolve the session is returned unchanged.
    """
    config = config or ReconstructConfig()

    if session.has_timing:
        return session

    if not session.commits or not config.repo_path:
        return session

    timestamps = get_commit_timestamps(
        session.commits,
        config.repo_path,
        zone_resolver=zone_resolver,
        default_timezone=config.default_timezone,
    )
    time_range = get_session_time_range(timestamps, default_timezone=config.default_timezone)
    if time_range.is_empty:
        logger.debug(
            "No commit timing for session %d on %s", session.session_number, session.date
        )
        return session

    start_time = time_range.earliest - timedelta(minutes=config.pre_commit_buffer_minutes)
    end_time = time_range.latest + timedelta(minutes=config.post_commit_buffer_minutes)

    return session.model_copy(
        update={
            "start_time": start_time,
            "end_time": end_time,
            "timezone": time_range.timezone,
            "timing_source": TimingSource.COMMITS,
        }
    )


def reconstruct_all_sessions(
    sessions: list[Session],
    config: ReconstructConfig | None = None,
    *,
    zone_resolver: OffsetZoneResolver | None = None,
) -> list[Session]:
    """Reconstruct timing for each session independently, preserving order."""
    config = config or ReconstructConfig()
    return [
        reconstruct_session_timing(session, config, zone_resolver=zone_resolver)
        for session in sessions
    ]
