from datetime import time

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from hospital.routes.availability_routes import (
    AddAvailabilityRequest,
    UpdateAvailabilityRequest,
    add_availability,
    delete_availability,
    list_availability,
    update_availability,
)
from hospital.scheduling.availability_repository import AvailabilityRepository
from hospital.scheduling.errors import (
    AvailabilityNotFoundError,
    DuplicateDayError,
    SchedulingValidationError,
)


def test_add_availability_request_strips_fields() -> None:
    request = AddAvailabilityRequest(day=' Monday ', start_time=' 9:00 AM ', end_time=None)

    assert request.day == 'Monday'
    assert request.start_time == '9:00 AM'
    assert request.end_time == ''


def test_add_availability_returns_canonical_window(scheduling_db, doctor, skip_schema_checks) -> None:
    response = add_availability(
        data=AddAvailabilityRequest(day='Monday', start_time='9:00 am', end_time='5:30 PM'),
        current_doctor=doctor,
        db=scheduling_db,
    )

    assert response.message == 'Availability added successfully.'
    assert response.availability.day == 'Monday'
    assert response.availability.start_time == '09:00:00'
    assert response.availability.end_time == '17:30:00'
    assert response.availability.is_active is True


def test_add_availability_rejects_invalid_day_before_touching_database(doctor) -> None:
    with pytest.raises(SchedulingValidationError) as exception_info:
        add_availability(
            data=AddAvailabilityRequest(day='Someday', start_time='09:00', end_time='17:00'),
            current_doctor=doctor,
            db=None,
        )

    assert exception_info.value.message == 'Invalid day selected.'


def test_add_availability_rejects_duplicate_day(scheduling_db, doctor, skip_schema_checks) -> None:
    request = AddAvailabilityRequest(day='Tuesday', start_time='09:00', end_time='12:00')
    add_availability(data=request, current_doctor=doctor, db=scheduling_db)

    with pytest.raises(DuplicateDayError) as exception_info:
        add_availability(
            data=AddAvailabilityRequest(day='Tuesday', start_time='13:00', end_time='17:00'),
            current_doctor=doctor,
            db=scheduling_db,
        )

    assert exception_info.value.message == 'Availability for this day already exists. Please edit the existing entry.'


def test_list_availability_returns_weekday_order(scheduling_db, doctor, skip_schema_checks) -> None:
    repository = AvailabilityRepository(scheduling_db)
    repository.add(doctor.id, 'Friday', '09:00:00', '12:00:00')
    repository.add(doctor.id, 'Monday', '10:00:00', '18:00:00')

    windows = list_availability(current_doctor=doctor, db=scheduling_db)

    assert [window.day for window in windows] == ['Monday', 'Friday']
    assert windows[0].start_time == '10:00:00'


def test_update_availability_changes_times(scheduling_db, doctor, skip_schema_checks) -> None:
    window = AvailabilityRepository(scheduling_db).add(doctor.id, 'Monday', '09:00:00', '17:00:00')

    response = update_availability(
        availability_id=window.id,
        data=UpdateAvailabilityRequest(start_time='08:00', end_time='12:00 PM'),
        current_doctor=doctor,
        db=scheduling_db,
    )

    assert response.message == 'Availability updated successfully.'
    assert response.availability.start_time == '08:00:00'
    assert response.availability.end_time == '12:00:00'


def test_update_availability_rejects_reversed_window(scheduling_db, doctor, skip_schema_checks) -> None:
    window = AvailabilityRepository(scheduling_db).add(doctor.id, 'Monday', '09:00:00', '17:00:00')

    with pytest.raises(SchedulingValidationError):
        update_availability(
            availability_id=window.id,
            data=UpdateAvailabilityRequest(start_time='12:00 PM', end_time='12:00 AM'),
            current_doctor=doctor,
            db=scheduling_db,
        )

    assert AvailabilityRepository(scheduling_db).list_by_doctor(doctor.id)[0].start_time == time(9, 0)


def test_update_availability_of_other_doctor_is_not_found(
    scheduling_db,
    doctor,
    other_doctor,
    skip_schema_checks,
) -> None:
    window = AvailabilityRepository(scheduling_db).add(doctor.id, 'Monday', '09:00:00', '17:00:00')

    with pytest.raises(AvailabilityNotFoundError) as exception_info:
        update_availability(
            availability_id=window.id,
            data=UpdateAvailabilityRequest(start_time='06:00', end_time='07:00'),
            current_doctor=other_doctor,
            db=scheduling_db,
        )

    assert exception_info.value.status_code == 404


def test_delete_availability_removes_window(scheduling_db, doctor, skip_schema_checks) -> None:
    window = AvailabilityRepository(scheduling_db).add(doctor.id, 'Monday', '09:00:00', '17:00:00')

    response = delete_availability(availability_id=window.id, current_doctor=doctor, db=scheduling_db)

    assert response.message == 'Availability deleted successfully.'
    assert AvailabilityRepository(scheduling_db).list_by_doctor(doctor.id) == []


def test_delete_availability_rejects_invalid_id(doctor) -> None:
    with pytest.raises(SchedulingValidationError) as exception_info:
        delete_availability(availability_id=0, current_doctor=doctor, db=None)

    assert exception_info.value.message == 'Invalid availability item.'


def test_database_failures_surface_generic_message(
    scheduling_db,
    doctor,
    skip_schema_checks,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def fail(*args, **kwargs):
        raise OperationalError('SELECT 1', {}, Exception('connection refused'))

    monkeypatch.setattr(AvailabilityRepository, 'list_by_doctor', fail)

    with pytest.raises(HTTPException) as exception_info:
        list_availability(current_doctor=doctor, db=scheduling_db)

    assert exception_info.value.status_code == 503
    assert exception_info.value.detail == 'Database error occurred. Please try again.'
