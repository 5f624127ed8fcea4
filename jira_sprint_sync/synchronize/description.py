"""Contains description comparison helpers for synchronization decisions.

Every description written by the engine ends with a trailer line recording when
it was last synchronized. The trailer is ignored when comparing descriptions so
that re-running the sync with unchanged content is a no-op.
"""

import re
from datetime import datetime
from zoneinfo import ZoneInfo

TRAILER_LABEL = "Last updated:"
TRAILER_SEPARATOR = "\n\n"
DEFAULT_TRAILER_TIMEZONE = "America/New_York"

TRAILER_PATTERN = re.compile(r"\n\nLast updated: [^\n]*\Z")
LINE_BREAK_PATTERN = re.compile(r"\r\n?")


def normalize_line_breaks(text: str) -> str:
    """Convert CRLF and bare CR line breaks to LF."""
    return LINE_BREAK_PATTERN.sub("\n", text)


def strip_trailer(text: str) -> str:
    """Remove every trailing ``Last updated`` trailer from ``text``.

    Stripping repeats until no trailer is left at the end, which makes the
    operation idempotent even for text carrying several stacked trailers.
    Line breaks in the result are always LF.
    """
    stripped = normalize_line_breaks(text)
    while True:
        candidate = TRAILER_PATTERN.sub("", stripped, count=1)
        if candidate == stripped:
            return stripped
        stripped = candidate


def equal_modulo_trailer(a: str, b: str) -> bool:
    """Check whether two descriptions are the same once trailers are removed."""
    return strip_trailer(a) == strip_trailer(b)


def diff_new_lines(existing: str, incoming: str) -> str:
    """Return the incoming lines that do not appear anywhere in the existing text.

    Order of the incoming text is preserved. This is a set-membership filter: a
    line that merely moved is not reported, and a line repeated in ``incoming``
    is reported every time it appears if it is absent from ``existing``.
    """
    existing_lines = set(normalize_line_breaks(existing).split("\n"))
    new_lines = [line for line in normalize_line_breaks(incoming).split("\n") if line not in existing_lines]
    return "\n".join(new_lines)


def format_trailer_timestamp(timestamp: datetime, timezone: str = DEFAULT_TRAILER_TIMEZONE) -> str:
    """Render a timestamp the way a US English locale does, in a fixed time zone.

    Example: ``10/18/2026, 9:05:03 AM``. Naive timestamps are taken as UTC.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=ZoneInfo("UTC"))
    local = timestamp.astimezone(ZoneInfo(timezone))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year}, {hour}:{local.minute:02d}:{local.second:02d} {meridiem}"


def with_trailer(text: str, timestamp: datetime, timezone: str = DEFAULT_TRAILER_TIMEZONE) -> str:
    """Append a fresh trailer to ``text``, replacing any trailer it already carries."""
    return f"{strip_trailer(text)}{TRAILER_SEPARATOR}{TRAILER_LABEL} {format_trailer_timestamp(timestamp, timezone)}"
