import os
from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from hospital.database import Base  # noqa: E402
from hospital.models.appointment import Appointment  # noqa: E402
from hospital.models.availability import DoctorAvailability  # noqa: E402
from hospital.models.doctor import Doctor  # noqa: E402

TABLES = [Doctor.__table__, DoctorAvailability.__table__, Appointment.__table__]


@pytest.fixture
def scheduling_db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=TABLES)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))


@pytest.fixture
def doctor(scheduling_db) -> Doctor:
    record = Doctor(email='house@medicare.org', name='Gregory House', specialization='General Medicine')
    scheduling_db.add(record)
    scheduling_db.commit()
    scheduling_db.refresh(record)
    return record


@pytest.fixture
def other_doctor(scheduling_db) -> Doctor:
    record = Doctor(email='wilson@medicare.org', name='James Wilson', specialization='Oncology')
    scheduling_db.add(record)
    scheduling_db.commit()
    scheduling_db.refresh(record)
    return record


@pytest.fixture
def skip_schema_checks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('hospital.routes.common.ensure_database_ready', lambda: None)


@pytest.fixture
def add_appointment(scheduling_db):
    def _add(doctor_id: int, appointment_date: date, appointment_time: time, status: str | None = 'Pending',
             patient_id: int = 1, notes: str | None = None) -> Appointment:
        appointment = Appointment(
            doctor_id=doctor_id,
            patient_id=patient_id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            status=status,
            notes=notes,
        )
        scheduling_db.add(appointment)
        scheduling_db.commit()
        scheduling_db.refresh(appointment)
        return appointment

    return _add
