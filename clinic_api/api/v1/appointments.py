from fastapi import APIRouter, Body, Depends, Query, status
from typing import List, Optional

from ...api.deps import (
    get_admin_role, get_booking_role, get_booking_service,
    get_clinician_role, get_query_service
)
from ...core.exceptions import MissingFieldsError
from ...core.timeutils import parse_utc_timestamp
from ...schemas.appointment import AppointmentCreate, AppointmentResponse, DateRange
from ...services.booking_service import BookingService
from ...services.query_service import AppointmentQueryService

router = APIRouter(tags=["Appointments"])

def get_date_range(
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
) -> DateRange:
    """Parse optional ``from``/``to`` bounds (ISO-8601 UTC)."""
    return DateRange(
        from_time=parse_utc_timestamp(from_) if from_ is not None else None,
        to_time=parse_utc_timestamp(to) if to is not None else None,
    )

@router.post(
    "/appointments",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_booking_role)],
)
def create_appointment(
    appointment_data: Optional[AppointmentCreate] = Body(None),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Book an appointment for a clinician and patient."""
    # No body at all is the same as every field missing
    appointment_data = appointment_data or AppointmentCreate()
    missing = appointment_data.missing_fields()
    if missing:
        raise MissingFieldsError(missing)
    
    return booking_service.create_appointment(appointment_data)

@router.get(
    "/clinicians/{clinician_id}/appointments",
    response_model=List[AppointmentResponse],
    dependencies=[Depends(get_clinician_role)],
)
def list_clinician_appointments(
    clinician_id: str,
    date_range: DateRange = Depends(get_date_range),
    query_service: AppointmentQueryService = Depends(get_query_service),
):
    """List a clinician's appointments, upcoming only unless ``from`` is given."""
    return query_service.list_appointments_for_clinician(clinician_id, date_range)

@router.get(
    "/appointments",
    response_model=List[AppointmentResponse],
    dependencies=[Depends(get_admin_role)],
)
def list_appointments(
    date_range: DateRange = Depends(get_date_range),
    query_service: AppointmentQueryService = Depends(get_query_service),
):
    """List appointments across all clinicians (admin only)."""
    return query_service.list_all_appointments(date_range)
