import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hospital.database import ensure_appointment_schema, ensure_availability_schema

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'
DATABASE_ERROR_DETAIL = 'Database error occurred. Please try again.'


def ensure_database_ready() -> None:
    try:
        ensure_availability_schema()
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        logger.exception('Schema check failed')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

def database_error(db: Session | None, exc: SQLAlchemyError) -> HTTPException:
    """Roll back, log, and build the generic error returned for store failures."""
    if db is not None:
        db.rollback()
    logger.error('Database operation failed', exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_ERROR_DETAIL,
    )
