"""
Dates -- instant parsing and whole-day window bounds.

Source records store their dates as ISO-8601 strings (sometimes with a
``Z`` or offset suffix), as ``datetime`` or as plain ``date`` values.
Everything is normalised to a naive ``datetime`` in one zone (UTC unless
the caller names another) so that instants from different record families
compare with each other.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timezone, tzinfo

from stock_kernel.exceptions import MalformedDateError

# Opening movements are dated here; it sorts before any real transaction.
BEGINNING_OF_TIME = datetime.min


def parse_instant(value: object, field: str = "date", tz: tzinfo | None = None) -> datetime:
    """
    Parse a stored record date into a naive datetime.

    Aware values are converted to ``tz`` (UTC when not given) before the
    offset is dropped, so whole-day bounds fall on that zone's midnight.
    Naive values are taken as already local to it.

    Raises:
        MalformedDateError: If the value is missing or not a recognisable
            date representation.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise MalformedDateError(value, field) from e
    else:
        raise MalformedDateError(value, field)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz or timezone.utc).replace(tzinfo=None)
    return parsed


def start_of_day(value: date | datetime) -> datetime:
    """First instant of the value's calendar day."""
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.min)


def end_of_day(value: date | datetime) -> datetime:
    """Last instant of the value's calendar day."""
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.max)


def parse_year_month(value: str) -> date:
    """
    Parse a ``YYYY-MM`` expiry string into the last day of that month.

    Raises:
        MalformedDateError: If the string is not a valid year-month.
    """
    try:
        year_text, month_text = value.strip().split("-")[:2]
        year, month = int(year_text), int(month_text)
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, last_day)
    except (ValueError, AttributeError) as e:
        raise MalformedDateError(value, "expiryDate") from e
