from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from hospital.core import config


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    config.DATABASE_URL,
    echo=config.DATABASE_ECHO,
    connect_args=_connect_args(config.DATABASE_URL),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_availability_schema_checked = False
_appointment_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_availability_schema() -> None:
    global _availability_schema_checked

    if _availability_schema_checked:
        return

    with _schema_lock:
        if _availability_schema_checked:
            return

        inspector = inspect(engine)

        if 'doctor_availability' not in inspector.get_table_names():
            _availability_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('doctor_availability')}
        migration_steps = [
            ('is_active', 'ALTER TABLE doctor_availability ADD COLUMN is_active BOOLEAN DEFAULT TRUE'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS uq_doctor_availability_day '
                    'ON doctor_availability(doctor_id, available_day)'
                )
            )

        _availability_schema_checked = True


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes VARCHAR'),
            ('updated_at', 'ALTER TABLE appointments ADD COLUMN updated_at TIMESTAMP'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_date '
                    'ON appointments(doctor_id, appointment_date, appointment_time)'
                )
            )
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_active_slot '
                    'ON appointments(doctor_id, appointment_date, appointment_time) '
                    "WHERE lower(status) IN ('pending', 'confirmed')"
                )
            )

        _appointment_schema_checked = True
