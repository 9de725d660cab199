"""Convert timed sessions into calendar event payloads.

Pure formatting: no API calls. The payload shape follows the calendar
API's event resource (``summary``, ``start``/``end`` with ``dateTime``
and ``timeZone``, ``colorId``, ``description``).
"""

from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field

from flowlog.models import NO_THEME, Session

# 5 = Banana (yellow), used for all flow events.
FLOW_COLOR_ID = "5"

MAX_OUTCOMES = 5
MAX_LEARNINGS = 3


class EventDateTime(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_time: str = Field(alias="dateTime")
    time_zone: str = Field(alias="timeZone")


class FlowCalendarEvent(BaseModel):
    """A calendar event describing one flow session."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    start: EventDateTime
    end: EventDateTime
    color_id: str = Field(default=FLOW_COLOR_ID, alias="colorId")
    description: str = ""

    def to_api_dict(self) -> dict[str, object]:
        """Serialize with the API's camelCase keys."""
        return self.model_dump(by_alias=True)


def _to_utc_iso(value: datetime) -> str:
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_summary(session: Session) -> str:
    theme = session.theme if session.theme != NO_THEME else f"Session {session.session_number}"
    return f"Flow: {session.project} - {theme}"


def _truncated(items: list[str], limit: int) -> list[str]:
    lines = [f"- {item}" for item in items[:limit]]
    if len(items) > limit:
        lines.append(f"- ... and {len(items) - limit} more")
    return lines


def format_description(session: Session) -> str:
    lines: list[str] = []

    if session.outcomes:
        lines.append("**Outcomes:**")
        lines.extend(_truncated(session.outcomes, MAX_OUTCOMES))
        lines.append("")

    if session.learnings:
        lines.append("**Learnings:**")
        lines.extend(_truncated(session.learnings, MAX_LEARNINGS))
        lines.append("")

    if session.commits:
        lines.append(f"**Commits:** {', '.join(session.commits)}")
        lines.append("")

    lines.append(f"_Source: {session.source_file}_")
    return "\n".join(lines)


def session_to_calendar_event(session: Session) -> FlowCalendarEvent | None:
    """Build an event for *session*, or None if it has no timing."""
    if session.start_time is None or session.end_time is None:
        return None

    return FlowCalendarEvent(
        summary=format_summary(session),
        start=EventDateTime(date_time=_to_utc_iso(session.start_time), time_zone=session.timezone),
        end=EventDateTime(date_time=_to_utc_iso(session.end_time), time_zone=session.timezone),
        description=format_description(session),
    )


def sessions_to_calendar_events(
    sessions: list[Session],
) -> tuple[list[FlowCalendarEvent], list[Session]]:
    """Split sessions into events and the untimed sessions that were skipped."""
    events: list[FlowCalendarEvent] = []
    skipped: list[Session] = []
    for session in sessions:
        event = session_to_calendar_event(session)
        if event is None:
            skipped.append(session)
        else:
            events.append(event)
    return events, skipped


def _local(value: str, zone: str) -> datetime:
    instant = datetime.fromisoformat(value)
    try:
        return instant.astimezone(ZoneInfo(zone))
    except (ValueError, ZoneInfoNotFoundError):
        return instant


def get_event_summary(events: list[FlowCalendarEvent]) -> str:
    """Human-readable preview of the events that would be created."""
    if not events:
        return "No events to create."

    lines = [f"{len(events)} event(s) to create:", ""]
    for event in events:
        start = _local(event.start.date_time, event.start.time_zone)
        end = _local(event.end.date_time, event.end.time_zone)
        duration = round((end - start).total_seconds() / 60)
        lines.append(
            f"  {start:%a, %b} {start.day} {start:%H:%M}-{end:%H:%M} ({duration}m): {event.summary}"
        )
    return "\n".join(lines)
