"""
Published date handling.

Dates are always timezone aware. Values without an offset are taken to be UTC.
"""

from datetime import datetime, date, timezone

from .errors import InvalidDateError

DATE_FORMAT = '%Y-%m-%d %H:%M:%S %z'

# Tried in order after the canonical format.
FALLBACK_FORMATS = [
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%dT%H:%M:%S%z',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%d',
]


def parse_datetime(value, source=None):
    """Parse a front matter date into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = _parse_string(value.strip(), source)
    else:
        raise InvalidDateError(value, 'expected a date string', source)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_string(value, source):
    if value.startswith('-'):
        raise InvalidDateError(value, 'negative years are not supported', source)
    for fmt in [DATE_FORMAT] + FALLBACK_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise InvalidDateError(value, "expected format 'YYYY-MM-DD HH:MM:SS +ZZZZ'", source)


def from_ymd(year, month, day, source=None):
    """Build a midnight UTC datetime, failing loudly on an impossible date."""
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError as e:
        raise InvalidDateError(f"{year:04d}-{month:02d}-{day:02d}", str(e), source)


def format_datetime(value):
    """Render a datetime in the canonical front matter format."""
    return value.strftime(DATE_FORMAT)
