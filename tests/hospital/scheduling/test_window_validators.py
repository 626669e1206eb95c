from datetime import date

import pytest

from hospital.scheduling.errors import SchedulingValidationError
from hospital.scheduling.validators import (
    END_BEFORE_START_MESSAGE,
    INVALID_DAY_MESSAGE,
    INVALID_ITEM_MESSAGE,
    INVALID_TIMES_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    WEEKDAYS,
    is_end_after_start,
    is_valid_day,
    validate_new_window,
    validate_window_update,
    weekday_name,
)


@pytest.mark.parametrize(
    ('start', 'end', 'expected'),
    [
        ('09:00:00', '09:00:00', False),
        ('09:00:00', '08:59:59', False),
        ('09:00:00', '09:00:01', True),
        ('00:00:00', '23:59:59', True),
    ],
)
def test_is_end_after_start_requires_strictly_later_end(start: str, end: str, expected: bool) -> None:
    assert is_end_after_start(start, end) is expected


@pytest.mark.parametrize(('start', 'end'), [('nine', '10:00:00'), ('09:00:00', ''), (None, '10:00:00')])
def test_is_end_after_start_returns_false_for_malformed_times(start, end) -> None:
    assert is_end_after_start(start, end) is False


def test_is_valid_day_accepts_only_canonical_day_names() -> None:
    assert all(is_valid_day(day) for day in WEEKDAYS)
    assert not is_valid_day('monday')
    assert not is_valid_day('Funday')
    assert not is_valid_day(None)


def test_weekday_name_maps_dates_to_day_names() -> None:
    assert weekday_name(date(2024, 6, 10)) == 'Monday'
    assert weekday_name(date(2024, 6, 16)) == 'Sunday'


def test_validate_new_window_returns_canonical_values() -> None:
    assert validate_new_window(' Monday ', '9:00 AM', '5:00 PM') == ('Monday', '09:00:00', '17:00:00')


@pytest.mark.parametrize(
    ('day', 'start', 'end', 'message'),
    [
        ('', '09:00', '17:00', MISSING_FIELDS_MESSAGE),
        ('Monday', '', '17:00', MISSING_FIELDS_MESSAGE),
        ('Monday', '09:00', 'later', MISSING_FIELDS_MESSAGE),
        ('Funday', '09:00', '17:00', INVALID_DAY_MESSAGE),
        ('Monday', '5:00 PM', '9:00 AM', END_BEFORE_START_MESSAGE),
        ('Monday', '12:00 PM', '12:00 AM', END_BEFORE_START_MESSAGE),
    ],
)
def test_validate_new_window_rejects_invalid_input(day: str, start: str, end: str, message: str) -> None:
    with pytest.raises(SchedulingValidationError) as exception_info:
        validate_new_window(day, start, end)

    assert exception_info.value.message == message
    assert exception_info.value.status_code == 400


def test_validate_window_update_checks_item_and_times() -> None:
    assert validate_window_update(3, '08:00', '12:00 PM') == ('08:00:00', '12:00:00')

    with pytest.raises(SchedulingValidationError) as missing_item:
        validate_window_update(0, '08:00', '12:00')
    assert missing_item.value.message == INVALID_ITEM_MESSAGE

    with pytest.raises(SchedulingValidationError) as bad_times:
        validate_window_update(3, '', '12:00')
    assert bad_times.value.message == INVALID_TIMES_MESSAGE

    with pytest.raises(SchedulingValidationError) as reversed_times:
        validate_window_update(3, '12:00', '08:00')
    assert reversed_times.value.message == END_BEFORE_START_MESSAGE
