"""Time-of-day parsing for availability and appointment forms.

Every time that enters the scheduling code is normalized to the canonical
24-hour ``HH:MM:SS`` string before it is compared or stored.
"""

from datetime import datetime, time

from dateutil import parser as dateutil_parser

CANONICAL_TIME_FORMAT = '%H:%M:%S'

# Strict formats, tried in order before the generic fallback.
ACCEPTED_TIME_FORMATS = (
    '%H:%M:%S',
    '%H:%M',
    '%I:%M %p',
    '%I:%M:%S %p',
)

_FALLBACK_DEFAULTS = (datetime(2000, 1, 1, 0, 0), datetime(2000, 1, 1, 1, 0))


def parse_time(value: str | None) -> str | None:
    """Return ``value`` as canonical ``HH:MM:SS`` or ``None`` if it is not a time.

    ``12:00 AM`` is midnight and ``12:00 PM`` is noon.
    """
    if value is None:
        return None

    candidate = value.strip()
    if not candidate:
        return None

    for time_format in ACCEPTED_TIME_FORMATS:
        try:
            return datetime.strptime(candidate, time_format).strftime(CANONICAL_TIME_FORMAT)
        except ValueError:
            continue

    # Parse against two defaults that differ only in the hour. Input without an
    # hour (a bare day number, a weekday) fills it from the default and is rejected.
    try:
        parsed = dateutil_parser.parse(candidate, default=_FALLBACK_DEFAULTS[0])
        fallback_hour = dateutil_parser.parse(candidate, default=_FALLBACK_DEFAULTS[1]).hour
    except (ValueError, OverflowError):
        return None
    if parsed.hour != fallback_hour:
        return None

    return parsed.strftime(CANONICAL_TIME_FORMAT)


def to_time(canonical: str | None) -> time | None:
    if not canonical:
        return None
    try:
        return datetime.strptime(canonical, CANONICAL_TIME_FORMAT).time()
    except ValueError:
        return None


def to_canonical(value: time) -> str:
    return value.strftime(CANONICAL_TIME_FORMAT)


def format_clock_label(value: time) -> str:
    hour = value.hour % 12 or 12
    suffix = 'pm' if value.hour >= 12 else 'am'
    return f'{hour}:{value.minute:02d} {suffix}'
