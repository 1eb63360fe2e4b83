from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from ..core.timeutils import format_utc

class AppointmentCreate(BaseModel):
    """Booking request body. Presence is checked by the route, not here.

    Timestamps are left untyped so that non-string values surface as
    InvalidDateFormat from the engine rather than as body validation errors.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    clinician_id: Optional[str] = None
    patient_id: Optional[str] = None
    start: Optional[Any] = None
    end: Optional[Any] = None

    @field_validator("clinician_id", "patient_id", mode="before")
    @classmethod
    def coerce_numeric_id(cls, value: Any) -> Any:
        # Opaque ids may arrive as JSON numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def missing_fields(self) -> List[str]:
        """Names (as sent on the wire) of absent or empty fields."""
        return [
            to_camel(name)
            for name in ("clinician_id", "patient_id", "start", "end")
            if getattr(self, name) is None or getattr(self, name) == ""
        ]

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    clinician_id: str
    patient_id: str
    start_time: datetime
    end_time: datetime
    created_at: datetime

    # Submitted text, echoed in place of the formatted datetime
    start_text: Optional[str] = Field(default=None, exclude=True)
    end_text: Optional[str] = Field(default=None, exclude=True)

    @field_serializer("start_time")
    def serialize_start_time(self, value: datetime) -> str:
        return format_utc(value, self.start_text)

    @field_serializer("end_time")
    def serialize_end_time(self, value: datetime) -> str:
        return format_utc(value, self.end_text)

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return format_utc(value)

class DateRange(BaseModel):
    """Optional bounds for appointment queries (naive UTC)."""

    from_time: Optional[datetime] = None
    to_time: Optional[datetime] = None
