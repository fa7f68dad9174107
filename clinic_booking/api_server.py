"""FastAPI server for the clinic booking core.

Features:
- REST mapping of the booking operations
- Typed error mapping (BookingError -> status code + ErrorResponse)
- Request IDs on every response and log line
- Structured logging
"""
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from clinic_booking import config
from clinic_booking.api.dependencies import get_account_id, get_booking_service
from clinic_booking.api.models import (
    AppointmentListResponse,
    AppointmentResponse,
    AvailabilityResponse,
    BookingRequest,
    ErrorResponse,
    PractitionerResponse,
    SlotResponse,
    SpecialtyResponse,
)
from clinic_booking.errors import BookingError, DependencyError
from clinic_booking.logging_config import (
    bind_request_id,
    generate_request_id,
    get_logger,
    setup_structured_logging,
)
from clinic_booking.service import BookingService
from clinic_booking.slots import default_booking_day, group_by_time_label

load_dotenv()
setup_structured_logging(config.get_log_level())
logger = get_logger(__name__)

ERROR_TITLES = {
    "VALIDATION_ERROR": "Validation Error",
    "SLOT_TAKEN": "Slot Taken",
    "AUTH_REQUIRED": "Authentication Required",
    "NOT_OWNER": "Forbidden",
    "NOT_FOUND": "Not Found",
    "INVALID_STATE": "Invalid State",
    "DEPENDENCY_ERROR": "Service Unavailable",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    logger.info("server_starting")
    yield
    if get_booking_service.cache_info().currsize:
        get_booking_service().store.close()
    logger.info("server_stopped")


app = FastAPI(
    title="Clinic Booking API",
    description="Specialty, practitioner and slot booking for patients",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Tag each request with an id, for logs and the X-Request-ID header."""
    request_id = generate_request_id()
    bind_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    """Map booking core errors to their HTTP status and error code."""
    logger.info("request_failed", code=exc.code, detail=str(exc), path=request.url.path)
    headers = {}
    if isinstance(exc, DependencyError) and exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ERROR_TITLES.get(exc.code, "Booking Error"),
            detail=str(exc),
            code=exc.code,
            retryable=exc.retryable
        ).model_dump(),
        headers=headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors consistently."""
    logger.warning("request_validation_failed", errors=str(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="Validation Error",
            detail=str(exc.errors()),
            code="VALIDATION_ERROR"
        ).model_dump()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions."""
    logger.error("unexpected_error", error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal Server Error",
            detail="An unexpected error occurred. Please try again later.",
            code="INTERNAL_ERROR"
        ).model_dump()
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "service": "clinic-booking-api",
        "version": "1.0.0"
    }


@app.get("/api/v1/specialties", tags=["Catalog"], response_model=list[SpecialtyResponse])
def list_specialties(service: BookingService = Depends(get_booking_service)):
    return [SpecialtyResponse.from_domain(s) for s in service.list_specialties()]


@app.get("/api/v1/practitioners", tags=["Catalog"], response_model=list[PractitionerResponse])
def list_practitioners(
    specialty_id: Optional[str] = Query(None, description="Only this specialty"),
    service: BookingService = Depends(get_booking_service)
):
    return [PractitionerResponse.from_domain(p) for p in service.list_practitioners(specialty_id)]


@app.get(
    "/api/v1/practitioners/{practitioner_id}/slots",
    tags=["Availability"],
    response_model=AvailabilityResponse
)
def get_available_slots(
    practitioner_id: str,
    day: Optional[date] = Query(None, description="YYYY-MM-DD; defaults to the next bookable day"),
    service: BookingService = Depends(get_booking_service)
):
    """
    Free slots for a practitioner on a day.

    Without ``day`` this is today, or tomorrow once the clinic day is
    nearly over.
    """
    if day is None:
        day = default_booking_day(service.now(), service.grid)

    slots = service.available_slots(practitioner_id, day)
    return AvailabilityResponse(
        practitioner_id=practitioner_id,
        day=day,
        slots=[SlotResponse.from_domain(s) for s in slots],
        by_time={
            label: [SlotResponse.from_domain(s) for s in group]
            for label, group in group_by_time_label(slots).items()
        },
        total=len(slots)
    )


@app.post(
    "/api/v1/appointments",
    tags=["Appointments"],
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED
)
def book_appointment(
    request: BookingRequest,
    account_id: str = Depends(get_account_id),
    service: BookingService = Depends(get_booking_service)
):
    """
    Book a slot.

    Raises:
        401: No X-Account-ID
        404: Unknown practitioner or specialty
        409: Slot taken since availability was read (retry with a new slot)
        422: Missing selection, off-grid or past instant
    """
    appointment = service.book(
        account_id=account_id,
        practitioner_id=request.practitioner_id,
        specialty_id=request.specialty_id,
        instant=request.instant
    )
    return AppointmentResponse.from_domain(appointment)


@app.post(
    "/api/v1/appointments/{appointment_id}/cancel",
    tags=["Appointments"],
    response_model=AppointmentResponse
)
def cancel_appointment(
    appointment_id: str,
    account_id: str = Depends(get_account_id),
    service: BookingService = Depends(get_booking_service)
):
    """Cancel an appointment. The record is kept with status 'cancelled'."""
    appointment = service.cancel(account_id, appointment_id)
    return AppointmentResponse.from_domain(appointment)


@app.get(
    "/api/v1/appointments/upcoming",
    tags=["Appointments"],
    response_model=AppointmentListResponse
)
def upcoming_appointments(
    limit: Optional[int] = Query(None, ge=1, le=100, description="Return only the next N"),
    account_id: str = Depends(get_account_id),
    service: BookingService = Depends(get_booking_service)
):
    appointments = service.upcoming(account_id, limit=limit)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.from_domain(a) for a in appointments],
        total=len(appointments)
    )


@app.get(
    "/api/v1/appointments/past",
    tags=["Appointments"],
    response_model=AppointmentListResponse
)
def past_appointments(
    account_id: str = Depends(get_account_id),
    service: BookingService = Depends(get_booking_service)
):
    appointments = service.past(account_id)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.from_domain(a) for a in appointments],
        total=len(appointments)
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clinic_booking.api_server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
