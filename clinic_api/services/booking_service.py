from sqlalchemy import func, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Callable, Optional, Type
import logging

from ..core.database import Base, unit_of_work
from ..core.exceptions import (
    AppointmentConflictError, InvalidTimeRangeError, MissingFieldsError,
    PastAppointmentError, StoreFailureError
)
from ..core.timeutils import parse_utc_timestamp, utcnow
from ..models.appointment import Appointment
from ..models.clinician import Clinician
from ..models.patient import Patient
from ..schemas.appointment import AppointmentCreate, AppointmentResponse

logger = logging.getLogger(__name__)

# Dialects with a native INSERT ... ON CONFLICT DO NOTHING
_INSERT_IF_ABSENT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

class BookingService:
    """Validates and persists new appointments.

    The overlap check, implicit clinician/patient creation and the insert
    run in one transaction. Concurrent bookings for the same clinician are
    serialized: SQLite engines open transactions with BEGIN IMMEDIATE,
    PostgreSQL takes a transaction-scoped advisory lock keyed by clinician,
    and other backends run the transaction at SERIALIZABLE.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def create_appointment(self, request: AppointmentCreate) -> AppointmentResponse:
        """Book an appointment, failing fast on the first invalid input."""
        missing = request.missing_fields()
        if missing:
            raise MissingFieldsError(missing)

        start = parse_utc_timestamp(request.start)
        end = parse_utc_timestamp(request.end)

        # Only the start is checked against the clock
        if start <= self.clock():
            raise PastAppointmentError()

        if start >= end:
            raise InvalidTimeRangeError()

        try:
            with unit_of_work(self.db, isolation_level=self._isolation_level()):
                self._lock_clinician(request.clinician_id)

                if self._has_overlap(request.clinician_id, start, end):
                    logger.warning(
                        f"Booking conflict for clinician {request.clinician_id}: "
                        f"{request.start} - {request.end}"
                    )
                    raise AppointmentConflictError()

                self._insert_if_absent(
                    Clinician,
                    id=request.clinician_id,
                    name=Clinician.placeholder_name(request.clinician_id),
                )
                self._insert_if_absent(
                    Patient,
                    id=request.patient_id,
                    name=Patient.placeholder_name(request.patient_id),
                )

                appointment = Appointment(
                    clinician_id=request.clinician_id,
                    patient_id=request.patient_id,
                    start_time=start,
                    end_time=end,
                    start_text=request.start,
                    end_text=request.end,
                )
                self.db.add(appointment)
                self.db.flush()

                # Pick up store-assigned created_at
                self.db.refresh(appointment)
                result = AppointmentResponse.model_validate(appointment)
        except SQLAlchemyError as exc:
            raise StoreFailureError(f"Could not create appointment: {exc}") from exc

        logger.info(
            f"Booked appointment {result.id} for clinician {result.clinician_id} "
            f"and patient {result.patient_id}"
        )
        return result

    def _dialect(self) -> str:
        return self.db.get_bind().dialect.name

    def _isolation_level(self) -> Optional[str]:
        if self._dialect() in ("sqlite", "postgresql"):
            return None
        return "SERIALIZABLE"

    def _lock_clinician(self, clinician_id: str):
        """Serialize bookings for one clinician until the transaction ends."""
        if self._dialect() == "postgresql":
            self.db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                {"key": f"clinician:{clinician_id}"},
            )

    def _has_overlap(self, clinician_id: str, start: datetime, end: datetime) -> bool:
        """Open-interval test; back-to-back appointments do not overlap."""
        existing = self.db.execute(
            select(Appointment.id)
            .where(
                Appointment.clinician_id == clinician_id,
                Appointment.start_time < end,
                Appointment.end_time > start,
            )
            .limit(1)
        ).first()
        return existing is not None

    def _insert_if_absent(self, model: Type[Base], **values):
        """Create a row unless one with the same id exists. Never overwrites."""
        insert = _INSERT_IF_ABSENT.get(self._dialect())
        if insert is not None:
            self.db.execute(
                insert(model).values(**values).on_conflict_do_nothing(index_elements=["id"])
            )
            return

        exists = self.db.execute(
            select(func.count()).select_from(model).where(model.id == values["id"])
        ).scalar()
        if not exists:
            self.db.add(model(**values))
            self.db.flush()
