from datetime import date, time

from sqlalchemy import func
from sqlalchemy.orm import Session

from hospital.models.appointment import ACTIVE_STATUSES, Appointment
from hospital.scheduling.errors import SchedulingValidationError
from hospital.scheduling.time_parser import parse_time, to_time

INVALID_TIME_MESSAGE = 'Invalid appointment time format.'


def coerce_slot_time(slot_time: str | time | None) -> time:
    if isinstance(slot_time, time):
        return slot_time.replace(microsecond=0)

    parsed = to_time(parse_time(slot_time))
    if parsed is None:
        raise SchedulingValidationError(INVALID_TIME_MESSAGE)
    return parsed


def count_active_appointments(
    db: Session,
    doctor_id: int,
    slot_date: date,
    slot_time: str | time,
    exclude_appointment_id: int | None = None,
) -> int:
    query = db.query(func.count(Appointment.id)).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_date == slot_date,
        Appointment.appointment_time == coerce_slot_time(slot_time),
        func.lower(Appointment.status).in_([status.lower() for status in ACTIVE_STATUSES]),
    )
    if exclude_appointment_id is not None:
        query = query.filter(Appointment.id != exclude_appointment_id)

    return query.scalar() or 0


def has_conflict(
    db: Session,
    doctor_id: int,
    slot_date: date,
    slot_time: str | time,
    exclude_appointment_id: int | None = None,
) -> bool:
    """True if a Pending or Confirmed appointment already holds the exact slot.

    ``exclude_appointment_id`` skips the appointment being rescheduled.
    """
    return count_active_appointments(db, doctor_id, slot_date, slot_time, exclude_appointment_id) > 0
