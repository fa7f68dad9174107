"""Domain types and the appointment status state machine.

- Specialty and Practitioner are seed data, never mutated.
- Slot is derived per query and never stored.
- Appointment is the persisted reservation; only its status changes.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List


class AppointmentStatus(str, Enum):
    """Appointment lifecycle states."""
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine transition map
# Pattern: Current state → [allowed next states]
VALID_TRANSITIONS: Dict[AppointmentStatus, List[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: [
        AppointmentStatus.CANCELLED,  # Patient cancels
        AppointmentStatus.COMPLETED,  # External confirmation after the visit
    ],
    # Terminal states
    AppointmentStatus.CANCELLED: [],
    AppointmentStatus.COMPLETED: [],
}

INITIAL_STATUS = AppointmentStatus.SCHEDULED


def validate_transition(
    current: AppointmentStatus,
    intended: AppointmentStatus
) -> bool:
    """
    Validate appointment status transition.

    Args:
        current: Current appointment status
        intended: Intended next status

    Returns:
        True if transition is valid

    Example:
        >>> validate_transition(
        ...     AppointmentStatus.SCHEDULED,
        ...     AppointmentStatus.CANCELLED
        ... )
        True
    """
    return intended in VALID_TRANSITIONS.get(current, [])


@dataclass(frozen=True)
class Specialty:
    id: str
    name: str


@dataclass(frozen=True)
class Practitioner:
    id: str
    name: str
    specialty_id: str


@dataclass(frozen=True)
class Slot:
    practitioner_id: str
    instant: datetime
    is_available: bool = True

    @property
    def time_label(self) -> str:
        """Time-of-day label used to group slots (HH:MM)."""
        return self.instant.strftime("%H:%M")


@dataclass(frozen=True)
class Appointment:
    id: str
    account_id: str
    practitioner_id: str
    specialty_id: str
    instant: datetime
    status: AppointmentStatus
    created_at: datetime

    @property
    def is_scheduled(self) -> bool:
        return self.status == AppointmentStatus.SCHEDULED
