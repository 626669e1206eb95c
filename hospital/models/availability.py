"""Availability model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Time, UniqueConstraint
from hospital.database import Base


class DoctorAvailability(Base):
    """Represents a doctor's recurring working hours for one day of the week."""
    __tablename__ = "doctor_availability"
    __table_args__ = (
        UniqueConstraint("doctor_id", "available_day", name="uq_doctor_availability_day"),
    )

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    available_day = Column(String, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, default=True)
