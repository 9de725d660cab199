"""Markdown grammar for work journals.

The journal format is a small line-oriented grammar. Each rule below is a
named, compiled pattern so heading and list precedence can be exercised on
its own in tests:

    document   := top_heading? session*
    top_heading:= "# " DATE (":" PROJECT ("-" DETAILS)?)?
    session    := "## Session " NUMBER (":" THEME)? NEWLINE body
    section    := "### " NAME NEWLINE (line | "####"+ heading)*
    item       := numbered | bullet | bold_line
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Grammar rules
# ---------------------------------------------------------------------------

DATE_IN_NAME = re.compile(r"(?P<date>\d{4}-\d{2}-\d{2})")
TOP_HEADING_DATE = re.compile(r"^#[ \t]+(?P<date>\d{4}-\d{2}-\d{2})", re.MULTILINE)
TOP_HEADING_PROJECT = re.compile(
    r"^#[ \t]+\d{4}-\d{2}-\d{2}:[ \t]*(?P<project>[^-\n]+)", re.MULTILINE
)

SESSION_HEADING = re.compile(r"^##[ \t]+Session[ \t]+(?P<number>\d+)", re.MULTILINE)
SESSION_BOUNDARY = re.compile(r"(?=^##[ \t]+Session[ \t]+\d+)", re.MULTILINE)
SESSION_THEME = re.compile(
    r"^##[ \t]+Session[ \t]+\d+:[ \t]*(?P<theme>.+)$", re.MULTILINE
)

TIME_ANNOTATION = re.compile(
    r"<!--[ \t]*session-time:[ \t]*(?P<start>\d{2}:\d{2})-(?P<end>\d{2}:\d{2})[ \t]*-->"
)
COMMIT_REF = re.compile(r"`(?P<hash>[0-9a-fA-F]{7,40})`")

# A level-2 or level-3 heading closes a section; level-4+ headings do not.
SECTION_END = re.compile(r"^#{2,3}(?!#)", re.MULTILINE)

NUMBERED_ITEM = re.compile(r"^[ \t]*\d+\.[ \t]+(?P<text>.+)$", re.MULTILINE)
BULLET_ITEM = re.compile(r"^[ \t]*[-*][ \t]+(?P<text>.+)$", re.MULTILINE)
BOLD_LINE = re.compile(r"^[ \t]*\*\*(?P<text>[^*]+)\*\*", re.MULTILINE)

BOLD = re.compile(r"\*\*([^*]+)\*\*")
CODE = re.compile(r"`([^`]+)`")


def _section_heading(name: str) -> re.Pattern[str]:
    return re.compile(
        rf"^###[ \t]+{re.escape(name)}", re.MULTILINE | re.IGNORECASE
    )


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def extract_section(text: str, name: str) -> str | None:
    """Return the ``### name`` section of *text*, heading line included.

    The section runs until the next level-2 or level-3 heading or the end
    of the text. Deeper headings stay inside the body. Matching is
    case-insensitive. Returns None when no such heading exists.
    """
    heading = _section_heading(name).search(text)
    if heading is None:
        return None

    body_start = text.find("\n", heading.end())
    if body_start == -1:
        return text[heading.start():]

    end = SECTION_END.search(text, body_start + 1)
    stop = end.start() if end else len(text)
    return text[heading.start():stop]


def clean_item(item: str) -> str:
    """Strip bold and inline-code delimiters plus surrounding whitespace."""
    item = BOLD.sub(r"\1", item)
    item = CODE.sub(r"\1", item)
    return item.strip()


def extract_list_items(section: str | None) -> list[str]:
    """Collect cleaned items from a section body.

    Numbered items come first, then bullets, then stand-alone bold lines
    whose text is not already contained in a captured item.
    """
    if not section:
        return []

    items = [clean_item(m.group("text")) for m in NUMBERED_ITEM.finditer(section)]
    items.extend(clean_item(m.group("text")) for m in BULLET_ITEM.finditer(section))

    for match in BOLD_LINE.finditer(section):
        text = match.group("text").strip()
        if not any(text in existing for existing in items):
            items.append(text)

    return items
