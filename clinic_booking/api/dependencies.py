"""FastAPI dependency injection functions."""
from functools import lru_cache
from typing import Optional

from fastapi import Header

from clinic_booking import config
from clinic_booking.errors import AuthError
from clinic_booking.service import BookingService


@lru_cache(maxsize=1)
def get_booking_service() -> BookingService:
    """
    Get booking service (cached singleton).

    One store (and so one engine pool and one set of slot locks) per
    process. Tests replace this through app.dependency_overrides.
    """
    return BookingService.from_database_url(config.get_database_url())


async def get_account_id(
    x_account_id: Optional[str] = Header(None, description="Acting account id")
) -> str:
    """
    Identity of the acting account, supplied by the session provider.

    Raises:
        AuthError: If the header is missing or blank
    """
    if not x_account_id or not x_account_id.strip():
        raise AuthError("X-Account-ID header is required")
    return x_account_id.strip()
