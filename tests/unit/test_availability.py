"""Tests for availability resolution against booked appointments."""
from datetime import date, datetime

import pytest

from clinic_booking.availability import available_slots
from clinic_booking.errors import DependencyError

DAY = date(2024, 1, 1)


def test_no_bookings_returns_full_grid(store, clock):
    """Clock at 07:00: the first free slot is the grid's 08:00, 20 in total."""
    slots = available_slots(store, "1", DAY, clock.now())

    assert len(slots) == 20
    assert slots[0].instant == datetime(2024, 1, 1, 8, 0)
    assert slots[-1].instant == datetime(2024, 1, 1, 17, 30)


def test_booking_removes_exactly_that_slot(store, engine, clock, slot_at):
    """Booking 09:00 removes 09:00 and nothing else."""
    before = available_slots(store, "1", DAY, clock.now())

    appointment = engine.book("A1", slot_at(9), "1", clock.now())
    assert appointment.status.value == "scheduled"

    after = available_slots(store, "1", DAY, clock.now())

    removed = {s.instant for s in before} - {s.instant for s in after}
    assert removed == {datetime(2024, 1, 1, 9, 0)}
    assert len(after) == 19
    assert [s.instant for s in after] == sorted(s.instant for s in after)


def test_booking_other_practitioner_does_not_affect_availability(store, engine, clock, slot_at):
    engine.book("A1", slot_at(9, practitioner_id="2"), "1", clock.now())

    assert len(available_slots(store, "1", DAY, clock.now())) == 20
    assert len(available_slots(store, "2", DAY, clock.now())) == 19


def test_booking_other_day_does_not_affect_availability(store, engine, clock, slot_at):
    engine.book("A1", slot_at(9, day=datetime(2024, 1, 2)), "1", clock.now())

    assert len(available_slots(store, "1", DAY, clock.now())) == 20


def test_cancelled_appointment_frees_slot(store, engine, clock, slot_at):
    appointment = engine.book("A1", slot_at(10, 30), "1", clock.now())
    assert len(available_slots(store, "1", DAY, clock.now())) == 19

    engine.cancel("A1", appointment.id, clock.now())

    slots = available_slots(store, "1", DAY, clock.now())
    assert len(slots) == 20
    assert datetime(2024, 1, 1, 10, 30) in {s.instant for s in slots}


def test_past_slots_are_excluded(store, clock):
    clock.set(datetime(2024, 1, 1, 16, 45))

    slots = available_slots(store, "1", DAY, clock.now())

    assert [s.instant.strftime("%H:%M") for s in slots] == ["17:00", "17:30"]


def test_store_failure_surfaces_as_dependency_error(store, clock):
    with store.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE appointments")

    with pytest.raises(DependencyError):
        available_slots(store, "1", DAY, clock.now())


def test_closed_day_has_no_availability(store, clock):
    assert available_slots(store, "1", date(2024, 1, 7), clock.now()) == []
