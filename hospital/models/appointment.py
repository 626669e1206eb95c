"""Appointment model definitions."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Time, func, text
from hospital.database import Base

STATUS_PENDING = "Pending"
STATUS_CONFIRMED = "Confirmed"
STATUS_CANCELLED = "Cancelled"
ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)


class Appointment(Base):
    """Represents a patient's appointment with a doctor."""
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_doctor_date", "doctor_id", "appointment_date", "appointment_time"),
        # At most one active booking per doctor slot.
        Index(
            "uq_appointments_active_slot",
            "doctor_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            sqlite_where=text("lower(status) IN ('pending', 'confirmed')"),
            postgresql_where=text("lower(status) IN ('pending', 'confirmed')"),
        ),
    )

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    patient_id = Column(Integer)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(Time, nullable=False)
    status = Column(String, default=STATUS_PENDING)
    notes = Column(String)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
