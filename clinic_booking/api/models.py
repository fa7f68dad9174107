"""Pydantic models for API request/response validation."""
from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinic_booking.slots import to_local_naive as _to_local_naive
from clinic_booking.state import Appointment, Practitioner, Slot, Specialty


class SpecialtyResponse(BaseModel):
    id: str
    name: str

    @classmethod
    def from_domain(cls, specialty: Specialty) -> "SpecialtyResponse":
        return cls(id=specialty.id, name=specialty.name)


class PractitionerResponse(BaseModel):
    id: str
    name: str
    specialty_id: str

    @classmethod
    def from_domain(cls, practitioner: Practitioner) -> "PractitionerResponse":
        return cls(
            id=practitioner.id,
            name=practitioner.name,
            specialty_id=practitioner.specialty_id
        )


class SlotResponse(BaseModel):
    practitioner_id: str
    instant: datetime
    time_label: str = Field(..., description="HH:MM label for grouping")
    is_available: bool

    @classmethod
    def from_domain(cls, slot: Slot) -> "SlotResponse":
        return cls(
            practitioner_id=slot.practitioner_id,
            instant=slot.instant,
            time_label=slot.time_label,
            is_available=slot.is_available
        )


class AvailabilityResponse(BaseModel):
    """Response schema for the slots endpoint."""
    practitioner_id: str
    day: date
    slots: List[SlotResponse] = Field(..., description="Free slots, ascending")
    by_time: Dict[str, List[SlotResponse]] = Field(
        ...,
        description="Free slots grouped by HH:MM label, in chronological order"
    )
    total: int


class BookingRequest(BaseModel):
    """Request schema for POST /api/v1/appointments."""
    practitioner_id: str = Field(..., min_length=1, max_length=64)
    specialty_id: str = Field(..., min_length=1, max_length=64)
    instant: datetime = Field(
        ...,
        description="Slot start in clinic local time",
        examples=["2024-01-01T09:00:00"]
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "practitioner_id": "1",
                "specialty_id": "1",
                "instant": "2024-01-01T09:00:00"
            }
        }
    )

    @field_validator("instant")
    @classmethod
    def to_local_naive(cls, v: datetime) -> datetime:
        """Offset-aware instants are converted to clinic local time."""
        return _to_local_naive(v)


class AppointmentResponse(BaseModel):
    id: str
    account_id: str
    practitioner_id: str
    specialty_id: str
    instant: datetime
    status: str
    created_at: datetime

    @classmethod
    def from_domain(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            account_id=appointment.account_id,
            practitioner_id=appointment.practitioner_id,
            specialty_id=appointment.specialty_id,
            instant=appointment.instant,
            status=appointment.status.value,
            created_at=appointment.created_at
        )


class AppointmentListResponse(BaseModel):
    appointments: List[AppointmentResponse]
    total: int


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    code: Optional[str] = Field(None, description="Error code")
    retryable: bool = Field(False, description="Whether retrying may succeed")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Slot Taken",
                "detail": "Slot 2024-01-01 09:00 is already booked",
                "code": "SLOT_TAKEN",
                "retryable": True
            }
        }
    )
