"""Availability: which grid slots are still free for a practitioner."""
from datetime import date, datetime
from typing import List

from clinic_booking.slots import DEFAULT_GRID, SlotGrid, generate_slots, truncate_to_minute
from clinic_booking.state import Slot
from clinic_booking.store import AppointmentStore


def available_slots(
    store: AppointmentStore,
    practitioner_id: str,
    day: date,
    now: datetime,
    grid: SlotGrid = DEFAULT_GRID
) -> List[Slot]:
    """
    Free slots for a practitioner on a day.

    Candidates come from the grid (future instants only); any instant held
    by a scheduled appointment of the practitioner is removed. Matching is
    to the minute. Booked instants for the day are read in one query, so
    the result reflects a single snapshot of the store.

    Args:
        store: Appointment store
        practitioner_id: Practitioner to check
        day: Calendar day
        now: Evaluation time
        grid: Slot grid policy

    Returns:
        Available slots ascending by instant

    Raises:
        DependencyError: If the store cannot be read
    """
    candidates = generate_slots(practitioner_id, day, now, grid)
    if not candidates:
        return []

    booked = {truncate_to_minute(i) for i in store.scheduled_instants(practitioner_id, day)}
    return [slot for slot in candidates if slot.instant not in booked]
