import logging
from datetime import date

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hospital.auth.dependencies import get_current_doctor
from hospital.database import get_db
from hospital.models.availability import DoctorAvailability
from hospital.models.doctor import Doctor
from hospital.routes import common
from hospital.scheduling.availability_repository import AvailabilityRepository
from hospital.scheduling.errors import SchedulingValidationError
from hospital.scheduling.time_parser import to_canonical
from hospital.scheduling.validators import INVALID_ITEM_MESSAGE, validate_new_window, validate_window_update

router = APIRouter(tags=['availability'])

logger = logging.getLogger(__name__)


def _strip(value: str | None) -> str:
    if value is None:
        return ''
    return str(value).strip()


class AddAvailabilityRequest(BaseModel):
    day: str = ''
    start_time: str = ''
    end_time: str = ''

    @field_validator('day', 'start_time', 'end_time', mode='before')
    @classmethod
    def strip_fields(cls, value: str | None) -> str:
        return _strip(value)


class UpdateAvailabilityRequest(BaseModel):
    start_time: str = ''
    end_time: str = ''

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def strip_fields(cls, value: str | None) -> str:
        return _strip(value)


class AvailabilityWindowResponse(BaseModel):
    id: int
    doctor_id: int
    day: str
    start_time: str
    end_time: str
    is_active: bool


class AvailabilityActionResponse(BaseModel):
    message: str
    availability: AvailabilityWindowResponse | None = None


def serialize_window(window: DoctorAvailability) -> AvailabilityWindowResponse:
    return AvailabilityWindowResponse(
        id=window.id,
        doctor_id=window.doctor_id,
        day=window.available_day,
        start_time=to_canonical(window.start_time),
        end_time=to_canonical(window.end_time),
        is_active=bool(window.is_active),
    )


@router.get('', response_model=list[AvailabilityWindowResponse])
def list_availability(
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    try:
        windows = AvailabilityRepository(db).list_by_doctor(current_doctor.id)
        return [serialize_window(window) for window in windows]
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc


@router.post('', response_model=AvailabilityActionResponse, status_code=status.HTTP_201_CREATED)
def add_availability(
    data: AddAvailabilityRequest,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    day, start, end = validate_new_window(data.day, data.start_time, data.end_time)

    common.ensure_database_ready()

    try:
        window = AvailabilityRepository(db).add(current_doctor.id, day, start, end)
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    logger.info('Doctor %s added availability for %s', current_doctor.id, day)
    return AvailabilityActionResponse(
        message='Availability added successfully.',
        availability=serialize_window(window),
    )


@router.put('/{availability_id}', response_model=AvailabilityActionResponse)
def update_availability(
    availability_id: int,
    data: UpdateAvailabilityRequest,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    start, end = validate_window_update(availability_id, data.start_time, data.end_time)

    common.ensure_database_ready()

    try:
        window = AvailabilityRepository(db).update(current_doctor.id, availability_id, start, end)
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    return AvailabilityActionResponse(
        message='Availability updated successfully.',
        availability=serialize_window(window),
    )


@router.delete('/{availability_id}', response_model=AvailabilityActionResponse)
def delete_availability(
    availability_id: int,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    if availability_id <= 0:
        raise SchedulingValidationError(INVALID_ITEM_MESSAGE)

    common.ensure_database_ready()

    try:
        AvailabilityRepository(db).delete(current_doctor.id, availability_id)
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    logger.info('Doctor %s deleted availability %s', current_doctor.id, availability_id)
    return AvailabilityActionResponse(message='Availability deleted successfully.')


@router.get('/appointment-counts', response_model=dict[str, int])
def upcoming_appointment_counts(
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    try:
        return AvailabilityRepository(db).upcoming_appointment_counts(current_doctor.id, date.today())
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc
