from datetime import datetime

from hospital.scheduling.errors import SchedulingValidationError
from hospital.scheduling.time_parser import CANONICAL_TIME_FORMAT, parse_time

WEEKDAYS = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')

MISSING_FIELDS_MESSAGE = 'Please fill in all required fields (day, start, end).'
INVALID_DAY_MESSAGE = 'Invalid day selected.'
END_BEFORE_START_MESSAGE = (
    'End time must be after start time (same day). Tip: 12:00 PM = noon, 12:00 AM = midnight.'
)
INVALID_ITEM_MESSAGE = 'Invalid availability item.'
INVALID_TIMES_MESSAGE = 'Please provide valid times.'


def is_end_after_start(start: str, end: str) -> bool:
    """True only if ``end`` is strictly later than ``start`` on the same day."""
    try:
        start_at = datetime.strptime(start, CANONICAL_TIME_FORMAT)
        end_at = datetime.strptime(end, CANONICAL_TIME_FORMAT)
    except (TypeError, ValueError):
        return False

    return end_at > start_at


def is_valid_day(day: str | None) -> bool:
    return day in WEEKDAYS


def weekday_name(value) -> str:
    return WEEKDAYS[value.weekday()]


def validate_new_window(day: str | None, start_raw: str | None, end_raw: str | None) -> tuple[str, str, str]:
    normalized_day = (day or '').strip()
    start = parse_time(start_raw)
    end = parse_time(end_raw)

    if not normalized_day or not start or not end:
        raise SchedulingValidationError(MISSING_FIELDS_MESSAGE)

    if not is_valid_day(normalized_day):
        raise SchedulingValidationError(INVALID_DAY_MESSAGE)

    if not is_end_after_start(start, end):
        raise SchedulingValidationError(END_BEFORE_START_MESSAGE)

    return normalized_day, start, end


def validate_window_update(availability_id: int | None, start_raw: str | None, end_raw: str | None) -> tuple[str, str]:
    if not availability_id or availability_id <= 0:
        raise SchedulingValidationError(INVALID_ITEM_MESSAGE)

    start = parse_time(start_raw)
    end = parse_time(end_raw)
    if not start or not end:
        raise SchedulingValidationError(INVALID_TIMES_MESSAGE)

    if not is_end_after_start(start, end):
        raise SchedulingValidationError(END_BEFORE_START_MESSAGE)

    return start, end
