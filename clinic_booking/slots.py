"""Slot generation on the fixed half-hour grid.

Every practitioner works the same grid: one candidate start every 30
minutes from 08:00 up to the 18:00 end-of-day boundary, so the last
bookable start is 17:30. The clinic is closed on Sundays.
Per-practitioner working hours are not modeled.
"""
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, FrozenSet, Iterable, List, Tuple

from clinic_booking import config
from clinic_booking.state import Slot


@dataclass(frozen=True)
class SlotGrid:
    """Daily grid of candidate start times."""
    start: time
    end: time  # exclusive
    step_minutes: int
    closed_weekdays: FrozenSet[int] = frozenset()

    @classmethod
    def from_config(cls) -> "SlotGrid":
        return cls(
            start=datetime.strptime(config.SLOT_GRID["start_time"], "%H:%M").time(),
            end=datetime.strptime(config.SLOT_GRID["end_time"], "%H:%M").time(),
            step_minutes=config.SLOT_GRID["slot_duration_minutes"],
            closed_weekdays=frozenset(config.CLOSED_WEEKDAYS),
        )

    def is_open(self, day: date) -> bool:
        return day.weekday() not in self.closed_weekdays

    def instants_for(self, day: date) -> List[datetime]:
        """All grid instants of ``day``, ascending."""
        if not self.is_open(day):
            return []

        step = timedelta(minutes=self.step_minutes)
        current = datetime.combine(day, self.start)
        day_end = datetime.combine(day, self.end)

        instants = []
        while current < day_end:
            instants.append(current)
            current += step
        return instants


DEFAULT_GRID = SlotGrid.from_config()


def truncate_to_minute(instant: datetime) -> datetime:
    """Drop seconds and sub-seconds; the grid is minute-aligned."""
    return instant.replace(second=0, microsecond=0)


def to_local_naive(instant: datetime) -> datetime:
    """Convert an offset-aware instant to naive clinic-local time."""
    if instant.tzinfo is not None:
        return instant.astimezone().replace(tzinfo=None)
    return instant


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[start, end) datetimes covering a calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def is_on_grid(instant: datetime, grid: SlotGrid = DEFAULT_GRID) -> bool:
    """True if ``instant`` is one of the grid's candidate starts."""
    if instant.second or instant.microsecond:
        return False
    return instant in grid.instants_for(instant.date())


def generate_slots(
    practitioner_id: str,
    day: date,
    now: datetime,
    grid: SlotGrid = DEFAULT_GRID
) -> List[Slot]:
    """
    Generate candidate slots for a practitioner on a day.

    Instants not strictly after ``now`` are left out entirely rather than
    marked unavailable, so a day fully in the past yields an empty list.

    Args:
        practitioner_id: Practitioner the slots belong to
        day: Calendar day
        now: Evaluation time
        grid: Slot grid policy

    Returns:
        Slots ascending by instant, all marked available
    """
    return [
        Slot(practitioner_id=practitioner_id, instant=instant, is_available=True)
        for instant in grid.instants_for(day)
        if instant > now
    ]


def group_by_time_label(slots: Iterable[Slot]) -> Dict[str, List[Slot]]:
    """
    Group slots by their HH:MM label, preserving chronological order.

    Relies on ``slots`` already being ascending by instant.
    """
    grouped: Dict[str, List[Slot]] = OrderedDict()
    for slot in slots:
        grouped.setdefault(slot.time_label, []).append(slot)
    return grouped


def default_booking_day(now: datetime, grid: SlotGrid = DEFAULT_GRID) -> date:
    """
    Day the booking screen opens on: today, or tomorrow late in the day.

    Closed days are skipped, so Saturday evening opens on Monday.
    """
    day = now.date()
    if now.hour >= config.NEXT_DAY_CUTOVER_HOUR:
        day += timedelta(days=1)
    for _ in range(7):
        if grid.is_open(day):
            break
        day += timedelta(days=1)
    return day
