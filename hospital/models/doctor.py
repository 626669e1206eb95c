"""Doctor model definitions."""

from sqlalchemy import Boolean, Column, Integer, String
from hospital.database import Base


class Doctor(Base):
    """Represents a doctor who owns availability windows and appointments."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    name = Column(String)
    specialization = Column(String)
    is_active = Column(Boolean, default=True)
