"""Appointment actions for doctors and patients.

Writes are always scoped to the doctor that owns the appointment. A write
that matches no row is reported as ``AppointmentNotFoundError`` instead of
being silently ignored.
"""

import logging
import math
from datetime import date, datetime, time

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hospital.models.appointment import (
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    Appointment,
)
from hospital.scheduling.availability_repository import AvailabilityRepository
from hospital.scheduling.conflicts import coerce_slot_time, has_conflict
from hospital.scheduling.errors import (
    AppointmentNotFoundError,
    SchedulingValidationError,
    SlotAlreadyBookedError,
)
from hospital.scheduling.time_parser import format_clock_label
from hospital.scheduling.validators import weekday_name

logger = logging.getLogger(__name__)

RESCHEDULE_MISSING_MESSAGE = 'Please provide both date and time for rescheduling.'
BOOKING_SLOT_TAKEN_MESSAGE = 'This time slot is already booked. Please select another time.'


def _is_blank(value: str | time | None) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _minute(value: time) -> time:
    return value.replace(second=0, microsecond=0)


def _set_status(db: Session, doctor_id: int, appointment_id: int, status: str) -> Appointment:
    try:
        updated = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.doctor_id == doctor_id,
        ).update({Appointment.status: status}, synchronize_session=False)
        if not updated:
            db.rollback()
            raise AppointmentNotFoundError()
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise SlotAlreadyBookedError() from exc

    logger.info('Appointment %s for doctor %s set to %s', appointment_id, doctor_id, status)
    return db.get(Appointment, appointment_id)


def confirm_appointment(db: Session, doctor_id: int, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.doctor_id == doctor_id,
    ).first()
    if appointment is None:
        raise AppointmentNotFoundError()

    # A cancelled appointment may be confirmed back into a slot someone else now holds.
    if has_conflict(
        db,
        doctor_id,
        appointment.appointment_date,
        appointment.appointment_time,
        exclude_appointment_id=appointment_id,
    ):
        db.rollback()
        raise SlotAlreadyBookedError()

    return _set_status(db, doctor_id, appointment_id, STATUS_CONFIRMED)


def cancel_appointment(db: Session, doctor_id: int, appointment_id: int) -> Appointment:
    return _set_status(db, doctor_id, appointment_id, STATUS_CANCELLED)


def reschedule_appointment(
    db: Session,
    doctor_id: int,
    appointment_id: int,
    new_date: date | None,
    new_time: str | time | None,
) -> Appointment:
    """Move an appointment to a free slot and re-confirm it.

    The conflict check and the write run in the same transaction. A concurrent
    booking that slips in between is caught by the active-slot unique index.
    """
    if new_date is None or _is_blank(new_time):
        raise SchedulingValidationError(RESCHEDULE_MISSING_MESSAGE)

    slot_time = coerce_slot_time(new_time)

    if has_conflict(db, doctor_id, new_date, slot_time, exclude_appointment_id=appointment_id):
        db.rollback()
        raise SlotAlreadyBookedError()

    try:
        updated = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.doctor_id == doctor_id,
        ).update(
            {
                Appointment.appointment_date: new_date,
                Appointment.appointment_time: slot_time,
                Appointment.status: STATUS_CONFIRMED,
            },
            synchronize_session=False,
        )
        if not updated:
            db.rollback()
            raise AppointmentNotFoundError()
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning('Concurrent booking blocked reschedule of appointment %s', appointment_id)
        raise SlotAlreadyBookedError() from exc

    return db.get(Appointment, appointment_id)


def book_appointment(
    db: Session,
    doctor_id: int,
    patient_id: int,
    appointment_date: date | None,
    appointment_time: str | None,
    reason: str | None,
    now: datetime | None = None,
) -> Appointment:
    """Book a Pending appointment inside the doctor's declared hours."""
    now = now or datetime.now()

    if appointment_date is None:
        raise SchedulingValidationError('Please select an appointment date.')
    if appointment_date < now.date():
        raise SchedulingValidationError('Appointment date cannot be in the past.')
    if _is_blank(appointment_time):
        raise SchedulingValidationError('Please select an appointment time.')

    notes = (reason or '').strip()
    if not notes:
        raise SchedulingValidationError('Please provide a reason for the appointment.')

    slot_time = coerce_slot_time(appointment_time)

    selected_day = weekday_name(appointment_date)
    window = AvailabilityRepository(db).active_schedule(doctor_id).get(selected_day)
    if window is None:
        raise SchedulingValidationError(f'Doctor is not available on {selected_day}s.')

    if _minute(slot_time) < _minute(window.start_time) or _minute(slot_time) > _minute(window.end_time):
        start_label = format_clock_label(window.start_time).upper()
        end_label = format_clock_label(window.end_time).upper()
        raise SchedulingValidationError(
            f'Selected time is outside the working hours for {selected_day} ({start_label} - {end_label}).'
        )

    if datetime.combine(appointment_date, slot_time) < now:
        raise SchedulingValidationError('The selected time has already passed. Please choose a future time.')

    if has_conflict(db, doctor_id, appointment_date, slot_time):
        db.rollback()
        raise SlotAlreadyBookedError(BOOKING_SLOT_TAKEN_MESSAGE)

    appointment = Appointment(
        doctor_id=doctor_id,
        patient_id=patient_id,
        appointment_date=appointment_date,
        appointment_time=slot_time,
        notes=notes,
        status=STATUS_PENDING,
    )
    db.add(appointment)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise SlotAlreadyBookedError(BOOKING_SLOT_TAKEN_MESSAGE) from exc

    db.refresh(appointment)
    return appointment


def list_doctor_appointments(
    db: Session,
    doctor_id: int,
    status: str = 'all',
    appointment_date: date | None = None,
    page: int = 1,
    per_page: int = 10,
) -> tuple[list[Appointment], int, int]:
    """Return one page of appointments, newest first, with the total and page count."""
    query = db.query(Appointment).filter(Appointment.doctor_id == doctor_id)

    normalized_status = (status or 'all').strip().lower()
    if normalized_status != 'all':
        query = query.filter(func.lower(Appointment.status) == normalized_status)
    if appointment_date is not None:
        query = query.filter(Appointment.appointment_date == appointment_date)

    total = query.count()
    total_pages = math.ceil(total / per_page) if per_page else 0
    page = max(1, page)

    appointments = query.order_by(
        Appointment.appointment_date.desc(),
        Appointment.appointment_time.desc(),
    ).offset((page - 1) * per_page).limit(per_page).all()

    return appointments, total, total_pages
