"""Tagged errors raised by the booking and query engines.

Every error carries a stable ``code`` so the HTTP layer can map each kind to
a response status without inspecting messages.
"""
from typing import Iterable


class SchedulingError(Exception):
    """Base class for all engine failures."""

    code = "SCHEDULING_ERROR"
    default_message = "Scheduling request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingFieldsError(SchedulingError):
    code = "MISSING_FIELDS"
    default_message = "Missing required fields"

    def __init__(self, fields: Iterable[str] = ()):
        self.fields = list(fields)
        message = self.default_message
        if self.fields:
            message = f"{message}: {', '.join(self.fields)}"
        super().__init__(message)


class InvalidDateFormatError(SchedulingError):
    code = "INVALID_DATE_FORMAT"
    default_message = "Invalid date format. Use ISO 8601 format (YYYY-MM-DDTHH:mm:ssZ)"


class PastAppointmentError(SchedulingError):
    code = "PAST_APPOINTMENT"
    default_message = "Cannot book appointments in the past"


class InvalidTimeRangeError(SchedulingError):
    code = "INVALID_TIME_RANGE"
    default_message = "Start time must be before end time"


class AppointmentConflictError(SchedulingError):
    code = "APPOINTMENT_CONFLICT"
    default_message = "Appointment time conflicts with existing booking"


class StoreFailureError(SchedulingError):
    """Raised when the underlying storage operation fails."""

    code = "STORE_FAILURE"
    default_message = "Storage operation failed"


__all__ = [
    "SchedulingError",
    "MissingFieldsError",
    "InvalidDateFormatError",
    "PastAppointmentError",
    "InvalidTimeRangeError",
    "AppointmentConflictError",
    "StoreFailureError",
]
