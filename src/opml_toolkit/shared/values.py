"""Conversions for OPML header values and XML text.

Dates use the RFC-822 layout OPML prescribes (``EEE, dd MMM yyyy HH:mm:ss Z``),
handled through :mod:`email.utils`. URIs are kept as strings once they pass
:func:`parse_uri`.
"""

import re
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional
from urllib.parse import urlsplit

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# EEE, dd MMM yyyy HH:mm:ss Z, with Z numeric or GMT/UT
_RFC822_DATE = re.compile(
    r"(?P<weekday>Mon|Tue|Wed|Thu|Fri|Sat|Sun), \d{2} "
    r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec) \d{4} "
    r"\d{2}:\d{2}:\d{2} (?:[+-]\d{4}|GMT|UT)"
)

# Characters a URI may never contain unencoded (RFC 3986 excluded set)
_INVALID_URI_CHARS = re.compile(r'[\s<>"{}|\\^`\x00-\x1f\x7f]')

# Ampersand must be replaced first so later entities are not double-escaped
_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def parse_rfc822_date(text: Optional[str]) -> Optional[datetime]:
    """Parse an RFC-822 date string.

    Args:
        text: Date such as ``"Mon, 20 Nov 1995 19:12:08 -0500"``

    Returns:
        Timezone-aware datetime, or None unless the text follows the layout
        exactly and its weekday agrees with the date.
        Dates carrying the "unknown zone" marker ``-0000`` are read as UTC.
    """
    if not text:
        return None
    match = _RFC822_DATE.fullmatch(text.strip())
    if match is None:
        return None
    try:
        parsed = parsedate_to_datetime(match.group(0))
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None or parsed.weekday() != _WEEKDAYS.index(match.group("weekday")):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_rfc822_date(value: datetime) -> str:
    """Format a datetime in the RFC-822 layout; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value)


def parse_uri(text: Optional[str]) -> Optional[str]:
    """Validate text as a URI reference.

    Returns:
        The stripped URI string, or None when empty or not a valid URI
    """
    if text is None:
        return None
    candidate = text.strip()
    if not candidate or _INVALID_URI_CHARS.search(candidate):
        return None
    try:
        urlsplit(candidate)
    except ValueError:
        return None
    return candidate


def xml_escape(value: str) -> str:
    """Escape the five XML special characters for text and attribute values."""
    for char, entity in _XML_ESCAPES:
        value = value.replace(char, entity)
    return value
