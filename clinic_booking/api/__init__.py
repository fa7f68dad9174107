"""API package initialization."""
from clinic_booking.api.models import AppointmentResponse, BookingRequest, ErrorResponse

__all__ = ["AppointmentResponse", "BookingRequest", "ErrorResponse"]
