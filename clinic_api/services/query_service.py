from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Callable, List, Optional

from ..core.database import unit_of_work
from ..core.exceptions import StoreFailureError
from ..core.timeutils import to_naive_utc, utcnow
from ..models.appointment import Appointment
from ..schemas.appointment import AppointmentResponse, DateRange

class AppointmentQueryService:
    """Read-only appointment listings.

    A range matches every appointment that intersects it. Without a lower
    bound only appointments starting now or later are returned; an upper
    bound on its own does not lift that default.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def list_appointments_for_clinician(
        self, clinician_id: str, date_range: Optional[DateRange] = None
    ) -> List[AppointmentResponse]:
        """Appointments for one clinician. Unknown ids yield an empty list."""
        return self._list(date_range, Appointment.clinician_id == clinician_id)

    def list_all_appointments(
        self, date_range: Optional[DateRange] = None
    ) -> List[AppointmentResponse]:
        return self._list(date_range)

    def _list(self, date_range: Optional[DateRange], *criteria) -> List[AppointmentResponse]:
        date_range = date_range or DateRange()
        query = select(Appointment)
        if criteria:
            query = query.where(*criteria)

        if date_range.from_time is not None:
            query = query.where(Appointment.end_time >= to_naive_utc(date_range.from_time))
        else:
            query = query.where(Appointment.start_time >= self.clock())

        if date_range.to_time is not None:
            query = query.where(Appointment.start_time <= to_naive_utc(date_range.to_time))

        query = query.order_by(Appointment.start_time.asc(), Appointment.id.asc())

        try:
            with unit_of_work(self.db):
                appointments = self.db.execute(query).scalars().all()
                return [AppointmentResponse.model_validate(appointment) for appointment in appointments]
        except SQLAlchemyError as exc:
            raise StoreFailureError(f"Could not list appointments: {exc}") from exc
