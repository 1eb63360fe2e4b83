"""UTC timestamp helpers shared by the engines and the HTTP layer."""
from datetime import datetime, timezone
from typing import Any, Optional
import re

from .exceptions import InvalidDateFormatError

UTC_DESIGNATOR = "Z"

# Extended ISO-8601 only: date, optional HH:MM[:SS[.f{1,6}]], trailing Z
UTC_TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:T(\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6}))?)?)?"
    r"Z$"
)

def utcnow() -> datetime:
    """Current instant as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def parse_utc_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string that ends with the UTC designator.

    Accepted forms are ``YYYY-MM-DD``, ``YYYY-MM-DDTHH:MM``,
    ``YYYY-MM-DDTHH:MM:SS`` and ``YYYY-MM-DDTHH:MM:SS.f`` (1 to 6 fraction
    digits), each followed by ``Z``. Returns a naive datetime in UTC; anything
    else, including impossible calendar values, raises InvalidDateFormatError.
    """
    if not isinstance(value, str):
        raise InvalidDateFormatError()

    match = UTC_TIMESTAMP_RE.match(value)
    if match is None:
        raise InvalidDateFormatError()

    year, month, day, hour, minute, second, fraction = match.groups()
    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0),
            int((fraction or "").ljust(6, "0")),
        )
    except ValueError as exc:
        raise InvalidDateFormatError() from exc

def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

def format_utc(value: datetime, submitted: Optional[str] = None) -> str:
    """Render a timestamp as ISO-8601 with the UTC designator.

    ``submitted`` is the text the caller originally sent; when present it is
    returned unchanged. Otherwise fractions are shown in milliseconds, or
    microseconds when the value needs them.
    """
    if submitted:
        return submitted

    value = to_naive_utc(value)
    if not value.microsecond:
        timespec = "seconds"
    elif value.microsecond % 1000 == 0:
        timespec = "milliseconds"
    else:
        timespec = "microseconds"
    return value.isoformat(timespec=timespec) + UTC_DESIGNATOR
