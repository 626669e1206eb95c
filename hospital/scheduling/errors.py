"""Scheduling exceptions.

Each error carries the message shown to the caller and the HTTP status the
API layer answers with. Nothing in here leaks database detail.
"""


class SchedulingError(Exception):
    """Base exception for availability and appointment operations."""

    status_code = 400
    default_message = 'Unable to complete the scheduling request.'

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class SchedulingValidationError(SchedulingError):
    """Raised when submitted days, dates or times are malformed or inconsistent."""


class DuplicateDayError(SchedulingError):
    """Raised when a doctor already has an availability window for the day."""

    status_code = 409
    default_message = 'Availability for this day already exists. Please edit the existing entry.'


class SlotAlreadyBookedError(SchedulingError):
    """Raised when an active appointment already occupies the requested slot."""

    status_code = 409
    default_message = 'The selected time slot is already booked.'


class AvailabilityNotFoundError(SchedulingError):
    status_code = 404
    default_message = 'Availability not found.'


class AppointmentNotFoundError(SchedulingError):
    status_code = 404
    default_message = 'Appointment not found.'
