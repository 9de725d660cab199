"""Exception types raised at flowlog's I/O boundary.

Parsing and timing reconstruction never raise on malformed input; these
errors only surface where files are read or configuration is applied.
"""


class FlowlogError(Exception):
    """Base error for flowlog."""


class JournalReadError(FlowlogError):
    """A journal file could not be read or decoded."""
