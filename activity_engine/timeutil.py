"""
Parsing of source date/time columns into comparable instants.

Source values are ISO-8601 strings: a bare date ("2024-01-01"), a naive
date-time, or an offset-aware timestamp. Naive values are wall-clock times
in the engine timezone. Every helper returns an aware datetime so that
comparisons against `now` never mix naive and aware values.
"""

from datetime import UTC, date, datetime, time, tzinfo

END_OF_DAY = time(23, 59, 59)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Attach tz to a naive datetime; aware values are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def parse_instant(value: str, tz: tzinfo = UTC) -> datetime:
    """
    Parse a date or date-time column.

    A bare date means midnight at the start of that day.

    Raises:
        ValueError if the value is not ISO-8601.
        TypeError if the value is not a string.
    """
    if not isinstance(value, str):
        raise TypeError(f"expected ISO-8601 string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return localize(datetime.fromisoformat(text), tz)


def parse_date(value: str) -> date:
    """Calendar date of a date or date-time column."""
    if not isinstance(value, str):
        raise TypeError(f"expected ISO-8601 string, got {type(value).__name__}")
    text = value.strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def combine_date_time(day: str, clock: str | None, tz: tzinfo = UTC) -> datetime:
    """
    Combine a date column and an optional time-of-day column.

    Without a time the instant is the last second of the day (23:59:59), so
    a dated-but-untimed item is not considered past until the day is over.
    Times are accepted as HH:MM:SS or HH:MM.
    """
    if clock is None or (isinstance(clock, str) and not clock.strip()):
        moment = END_OF_DAY
    elif isinstance(clock, str):
        moment = time.fromisoformat(clock.strip())
    else:
        raise TypeError(f"expected time string, got {type(clock).__name__}")

    combined = datetime.combine(parse_date(day), moment.replace(tzinfo=None))
    return localize(combined, moment.tzinfo or tz)
