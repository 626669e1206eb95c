import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hospital.auth.dependencies import get_current_doctor
from hospital.core import config
from hospital.database import get_db
from hospital.models.appointment import Appointment
from hospital.models.doctor import Doctor
from hospital.routes import common
from hospital.scheduling import appointments as appointment_actions
from hospital.scheduling.slot_grid import TimeSlot, build_grid, fetch_grid_appointments
from hospital.scheduling.time_parser import to_canonical

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

MAX_APPOINTMENT_NOTES_LENGTH = 600
DOCTOR_PROMPT_MESSAGE = 'Enter a Doctor ID to view the time slot grid.'


class BookAppointmentRequest(BaseModel):
    doctor_id: int
    patient_id: int
    appointment_date: date | None = None
    appointment_time: str = ''
    reason: str = ''

    @field_validator('appointment_time', mode='before')
    @classmethod
    def normalize_time(cls, value: str | None) -> str:
        return '' if value is None else str(value).strip()

    @field_validator('reason', mode='before')
    @classmethod
    def validate_reason(cls, value: str | None) -> str:
        normalized = '' if value is None else str(value).strip()
        if len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Reason must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')
        return normalized


class RescheduleAppointmentRequest(BaseModel):
    new_date: date | None = None
    new_time: str = ''

    @field_validator('new_time', mode='before')
    @classmethod
    def normalize_time(cls, value: str | None) -> str:
        return '' if value is None else str(value).strip()


class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    patient_id: int | None = None
    appointment_date: date
    appointment_time: str
    status: str
    notes: str | None = None


class AppointmentActionResponse(BaseModel):
    message: str
    appointment: AppointmentResponse


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentResponse]
    total: int
    page: int
    total_pages: int


class SlotOccupantResponse(BaseModel):
    appointment_id: int
    patient_id: int | None = None
    status: str | None = None
    notes: str | None = None


class SlotResponse(BaseModel):
    time_label: str
    display_label: str
    state: str
    occupant: SlotOccupantResponse | None = None


class SlotGridResponse(BaseModel):
    doctor_id: int | None = None
    date: date
    slots: list[SlotResponse]
    message: str | None = None


def serialize_appointment(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        doctor_id=appointment.doctor_id,
        patient_id=appointment.patient_id,
        appointment_date=appointment.appointment_date,
        appointment_time=to_canonical(appointment.appointment_time),
        status=appointment.status or 'Pending',
        notes=appointment.notes,
    )


def serialize_slot(slot: TimeSlot) -> SlotResponse:
    occupant = None
    if slot.appointment is not None:
        occupant = SlotOccupantResponse(
            appointment_id=slot.appointment.id,
            patient_id=slot.appointment.patient_id,
            status=slot.appointment.status,
            notes=slot.appointment.notes,
        )
    return SlotResponse(
        time_label=slot.time_label,
        display_label=slot.display_label,
        state=slot.state,
        occupant=occupant,
    )


@router.get('', response_model=AppointmentListResponse)
def list_appointments(
    status_filter: str = Query(default='all', alias='status'),
    appointment_date: date | None = Query(default=None, alias='date'),
    page: int = Query(default=1, ge=1),
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    try:
        appointments, total, total_pages = appointment_actions.list_doctor_appointments(
            db,
            current_doctor.id,
            status=status_filter,
            appointment_date=appointment_date,
            page=page,
            per_page=config.APPOINTMENTS_PER_PAGE,
        )
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    return AppointmentListResponse(
        appointments=[serialize_appointment(appointment) for appointment in appointments],
        total=total,
        page=page,
        total_pages=total_pages,
    )


@router.post('', response_model=AppointmentActionResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(data: BookAppointmentRequest, db: Session = Depends(get_db)):
    common.ensure_database_ready()

    try:
        appointment = appointment_actions.book_appointment(
            db,
            doctor_id=data.doctor_id,
            patient_id=data.patient_id,
            appointment_date=data.appointment_date,
            appointment_time=data.appointment_time,
            reason=data.reason,
        )
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    logger.info('Patient %s booked appointment %s with doctor %s', data.patient_id, appointment.id, data.doctor_id)
    return AppointmentActionResponse(
        message='Appointment booked successfully! You will receive a confirmation shortly.',
        appointment=serialize_appointment(appointment),
    )


@router.post('/{appointment_id}/confirm', response_model=AppointmentActionResponse)
def confirm_appointment(
    appointment_id: int,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    try:
        appointment = appointment_actions.confirm_appointment(db, current_doctor.id, appointment_id)
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    return AppointmentActionResponse(
        message='Appointment confirmed successfully.',
        appointment=serialize_appointment(appointment),
    )


@router.post('/{appointment_id}/cancel', response_model=AppointmentActionResponse)
def cancel_appointment(
    appointment_id: int,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    try:
        appointment = appointment_actions.cancel_appointment(db, current_doctor.id, appointment_id)
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    return AppointmentActionResponse(
        message='Appointment cancelled successfully.',
        appointment=serialize_appointment(appointment),
    )


@router.post('/{appointment_id}/reschedule', response_model=AppointmentActionResponse)
def reschedule_appointment(
    appointment_id: int,
    data: RescheduleAppointmentRequest,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    try:
        appointment = appointment_actions.reschedule_appointment(
            db,
            current_doctor.id,
            appointment_id,
            new_date=data.new_date,
            new_time=data.new_time,
        )
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    logger.info('Doctor %s rescheduled appointment %s', current_doctor.id, appointment_id)
    return AppointmentActionResponse(
        message='Appointment rescheduled successfully.',
        appointment=serialize_appointment(appointment),
    )


@router.get('/slot-grid', response_model=SlotGridResponse)
def get_slot_grid(
    doctor_id: int | None = Query(default=None, ge=1),
    slot_date: date | None = Query(default=None, alias='date'),
    range_start: str = Query(default=config.SLOT_GRID_START),
    range_end: str = Query(default=config.SLOT_GRID_END),
    step_minutes: int = Query(default=config.SLOT_GRID_STEP_MINUTES, ge=5, le=240),
    db: Session = Depends(get_db),
):
    chosen_date = slot_date or date.today()

    if not doctor_id:
        return SlotGridResponse(doctor_id=None, date=chosen_date, slots=[], message=DOCTOR_PROMPT_MESSAGE)

    common.ensure_database_ready()

    try:
        booked_appointments = fetch_grid_appointments(db, doctor_id, chosen_date)
    except SQLAlchemyError as exc:
        raise common.database_error(db, exc) from exc

    slots = build_grid(
        doctor_id,
        chosen_date,
        booked_appointments,
        range_start=range_start,
        range_end=range_end,
        step_minutes=step_minutes,
    )
    return SlotGridResponse(
        doctor_id=doctor_id,
        date=chosen_date,
        slots=[serialize_slot(slot) for slot in slots],
    )
