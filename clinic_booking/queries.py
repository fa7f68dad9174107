"""Upcoming and past views over an account's appointments.

Pure functions: callers pass one snapshot of appointments and a "now".
Every appointment lands in exactly one of the two views.
"""
from datetime import datetime
from typing import Iterable, List

from clinic_booking import config
from clinic_booking.state import Appointment, AppointmentStatus


def is_upcoming(appointment: Appointment, now: datetime) -> bool:
    return appointment.status == AppointmentStatus.SCHEDULED and appointment.instant >= now


def upcoming(appointments: Iterable[Appointment], now: datetime) -> List[Appointment]:
    """Scheduled appointments not yet started, soonest first."""
    return sorted(
        (a for a in appointments if is_upcoming(a, now)),
        key=lambda a: a.instant
    )


def past(appointments: Iterable[Appointment], now: datetime) -> List[Appointment]:
    """Completed, cancelled, or scheduled-but-elapsed appointments, most recent first."""
    return sorted(
        (a for a in appointments if not is_upcoming(a, now)),
        key=lambda a: a.instant,
        reverse=True
    )


def next_appointments(
    appointments: Iterable[Appointment],
    now: datetime,
    limit: int = config.UPCOMING_PREVIEW_LIMIT
) -> List[Appointment]:
    """Dashboard preview: the first ``limit`` upcoming appointments."""
    return upcoming(appointments, now)[:limit]
