import logging
from collections import Counter
from datetime import date

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hospital.models.appointment import ACTIVE_STATUSES, Appointment
from hospital.models.availability import DoctorAvailability
from hospital.scheduling.errors import AvailabilityNotFoundError, DuplicateDayError
from hospital.scheduling.time_parser import to_time
from hospital.scheduling.validators import WEEKDAYS, weekday_name

logger = logging.getLogger(__name__)

WEEKDAY_ORDER = case(
    {day: position for position, day in enumerate(WEEKDAYS)},
    value=DoctorAvailability.available_day,
    else_=len(WEEKDAYS),
)


class AvailabilityRepository:
    """Weekly availability windows, at most one per doctor and day.

    Start and end times are expected to be canonical and already validated.
    Every write is scoped to the owning doctor.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, doctor_id: int, day: str, start: str, end: str) -> DoctorAvailability:
        existing = self.db.query(func.count(DoctorAvailability.id)).filter(
            DoctorAvailability.doctor_id == doctor_id,
            DoctorAvailability.available_day == day,
        ).scalar()
        if existing:
            raise DuplicateDayError()

        window = DoctorAvailability(
            doctor_id=doctor_id,
            available_day=day,
            start_time=to_time(start),
            end_time=to_time(end),
            is_active=True,
        )
        self.db.add(window)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info('Concurrent availability insert for doctor %s on %s', doctor_id, day)
            raise DuplicateDayError() from exc

        self.db.refresh(window)
        return window

    def update(self, doctor_id: int, availability_id: int, start: str, end: str) -> DoctorAvailability:
        updated = self.db.query(DoctorAvailability).filter(
            DoctorAvailability.id == availability_id,
            DoctorAvailability.doctor_id == doctor_id,
        ).update(
            {
                DoctorAvailability.start_time: to_time(start),
                DoctorAvailability.end_time: to_time(end),
            },
            synchronize_session=False,
        )
        if not updated:
            self.db.rollback()
            raise AvailabilityNotFoundError()

        self.db.commit()
        return self.db.get(DoctorAvailability, availability_id)

    def delete(self, doctor_id: int, availability_id: int) -> None:
        # Appointments booked inside the window are left untouched.
        deleted = self.db.query(DoctorAvailability).filter(
            DoctorAvailability.id == availability_id,
            DoctorAvailability.doctor_id == doctor_id,
        ).delete(synchronize_session=False)
        if not deleted:
            self.db.rollback()
            raise AvailabilityNotFoundError()

        self.db.commit()

    def list_by_doctor(self, doctor_id: int) -> list[DoctorAvailability]:
        return self.db.query(DoctorAvailability).filter(
            DoctorAvailability.doctor_id == doctor_id,
        ).order_by(WEEKDAY_ORDER, DoctorAvailability.id).all()

    def active_schedule(self, doctor_id: int) -> dict[str, DoctorAvailability]:
        windows = self.db.query(DoctorAvailability).filter(
            DoctorAvailability.doctor_id == doctor_id,
            DoctorAvailability.is_active.is_(True),
        ).order_by(WEEKDAY_ORDER).all()
        return {window.available_day: window for window in windows}

    def upcoming_appointment_counts(self, doctor_id: int, today: date) -> dict[str, int]:
        """Active appointments on or after ``today`` grouped by weekday name."""
        appointment_dates = self.db.query(Appointment.appointment_date).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date >= today,
            func.lower(Appointment.status).in_([status.lower() for status in ACTIVE_STATUSES]),
        ).all()

        counts = Counter(weekday_name(appointment_date) for (appointment_date,) in appointment_dates)
        return {day: counts[day] for day in WEEKDAYS if counts[day]}
