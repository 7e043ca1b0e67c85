"""Shelf-life arithmetic: days until expiry and the matching status label."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta

DEFAULT_SHELF_LIFE_DAYS = 7

_ONE_DAY = timedelta(days=1)


class DateParseError(ValueError):
    """Raised when an expiry date cannot be read as a calendar date."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid expiry date: {value!r} (expected YYYY-MM-DD)")
        self.value = value


def parse_expiry_date(value: str | date | datetime) -> date | datetime:
    """Parse an expiry date.

    Accepts ``date``/``datetime`` objects as-is and ISO 8601 strings
    (``2024-12-31`` or a full timestamp, with an optional trailing ``Z``).

    Raises:
        DateParseError: If the value is not a recognisable date.
    """
    if isinstance(value, (date, datetime)):
        return value
    if not isinstance(value, str):
        raise DateParseError(value)

    text = value.strip()
    if not text:
        raise DateParseError(value)

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise DateParseError(value) from None


def days_until(
    expiry: str | date | datetime | None,
    *,
    now: datetime | None = None,
    default: int = DEFAULT_SHELF_LIFE_DAYS,
) -> int:
    """Return the signed number of days from ``now`` until ``expiry``.

    Partial days round up, so anything later today counts as 0 and anything
    within the next 24 hours counts as 1. A plain date is taken as local
    midnight. Returns ``default`` when no expiry is given.

    Raises:
        DateParseError: If ``expiry`` is a string that cannot be parsed.
    """
    if expiry is None or (isinstance(expiry, str) and not expiry.strip()):
        return default

    parsed = parse_expiry_date(expiry)
    if not isinstance(parsed, datetime):
        parsed = datetime(parsed.year, parsed.month, parsed.day)

    if now is None:
        now = datetime.now(parsed.tzinfo) if parsed.tzinfo else datetime.now()
    elif (now.tzinfo is None) != (parsed.tzinfo is None):
        # Mixed naive/aware: drop the offset and compare wall-clock times.
        parsed = parsed.replace(tzinfo=None) if parsed.tzinfo else parsed
        now = now.replace(tzinfo=None) if now.tzinfo else now

    return math.ceil((parsed - now) / _ONE_DAY)


def status_label(days: int) -> str:
    """Human-readable expiry status for a day count."""
    if days < 0:
        return "EXPIRED"
    if days == 0:
        return "EXPIRES TODAY"
    if days == 1:
        return "Expires tomorrow"
    return f"Expires in {days} days"
