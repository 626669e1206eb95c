"""Daily time slot grid for a doctor.

The grid covers a fixed operating day (09:00 to 17:00 in 30 minute steps by
default) and does not consult the doctor's declared availability windows.
Each generated time point is marked free, pending or booked depending on the
appointment found at exactly that time.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Sequence

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from hospital.models.appointment import Appointment
from hospital.scheduling.errors import SchedulingValidationError
from hospital.scheduling.time_parser import format_clock_label, parse_time, to_time

DEFAULT_RANGE_START = '09:00'
DEFAULT_RANGE_END = '17:00'
DEFAULT_STEP_MINUTES = 30

SLOT_FREE = 'free'
SLOT_PENDING = 'pending'
SLOT_BOOKED = 'booked'

PENDING_STATUSES = frozenset({'pending', 'awaiting', 'hold'})
OCCUPYING_STATUSES = frozenset({'confirmed', 'approved', 'scheduled'}) | PENDING_STATUSES


@dataclass(frozen=True)
class TimeSlot:
    time_label: str
    display_label: str
    state: str
    appointment: Appointment | None = None


def _normalize_status(status: str | None) -> str | None:
    if status is None:
        return None
    return status.strip().lower()


def occupies_slot(status: str | None) -> bool:
    # Appointments without a status predate status tracking and still hold their slot.
    normalized = _normalize_status(status)
    return normalized is None or normalized in OCCUPYING_STATUSES


def classify_status(status: str | None) -> str:
    if _normalize_status(status) in PENDING_STATUSES:
        return SLOT_PENDING
    return SLOT_BOOKED


def _minute_key(value: time) -> time:
    return value.replace(second=0, microsecond=0)


def generate_time_points(
    range_start: str = DEFAULT_RANGE_START,
    range_end: str = DEFAULT_RANGE_END,
    step_minutes: int = DEFAULT_STEP_MINUTES,
) -> list[time]:
    """Every time from ``range_start`` to ``range_end`` inclusive, ascending."""
    start = to_time(parse_time(range_start))
    end = to_time(parse_time(range_end))
    if start is None or end is None:
        raise SchedulingValidationError('Invalid slot grid range.')
    if step_minutes <= 0:
        raise SchedulingValidationError('Slot step must be a positive number of minutes.')

    anchor = date.min
    current = datetime.combine(anchor, start)
    last = datetime.combine(anchor, end)
    step = timedelta(minutes=step_minutes)

    points: list[time] = []
    while current <= last:
        points.append(current.time())
        current += step
        if current.date() != anchor:
            break

    return points


def index_appointments_by_time(
    doctor_id: int,
    slot_date: date,
    appointments: Iterable[Appointment],
) -> dict[time, Appointment]:
    """Map each minute to its occupying appointment.

    When several appointments share a minute, the last one in ``appointments`` wins.
    """
    by_time: dict[time, Appointment] = {}
    for appointment in appointments:
        if appointment.doctor_id != doctor_id or appointment.appointment_date != slot_date:
            continue
        if appointment.appointment_time is None or not occupies_slot(appointment.status):
            continue
        by_time[_minute_key(appointment.appointment_time)] = appointment

    return by_time


def build_grid(
    doctor_id: int | None,
    slot_date: date,
    booked_appointments: Sequence[Appointment],
    range_start: str = DEFAULT_RANGE_START,
    range_end: str = DEFAULT_RANGE_END,
    step_minutes: int = DEFAULT_STEP_MINUTES,
) -> list[TimeSlot] | None:
    """Classify every grid time point for one doctor and date.

    Returns ``None`` when no doctor was given, so the caller can prompt for one.
    """
    if not doctor_id:
        return None

    booked_by_time = index_appointments_by_time(doctor_id, slot_date, booked_appointments)

    slots: list[TimeSlot] = []
    for point in generate_time_points(range_start, range_end, step_minutes):
        appointment = booked_by_time.get(_minute_key(point))
        state = classify_status(appointment.status) if appointment is not None else SLOT_FREE
        slots.append(
            TimeSlot(
                time_label=point.strftime('%H:%M'),
                display_label=format_clock_label(point),
                state=state,
                appointment=appointment,
            )
        )

    return slots


def fetch_grid_appointments(db: Session, doctor_id: int, slot_date: date) -> list[Appointment]:
    return db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_date == slot_date,
        or_(
            func.lower(func.trim(Appointment.status)).in_(sorted(OCCUPYING_STATUSES)),
            Appointment.status.is_(None),
        ),
    ).order_by(Appointment.appointment_time.asc(), Appointment.id.asc()).all()
