"""Booking service: the operations exposed to the UI/API layer.

The acting account is always an explicit argument; the service trusts the
identity it is given and never authenticates. "Now" comes from the
injected clock.
"""
from datetime import date, datetime
from typing import List, Optional, Sequence

from clinic_booking import availability, queries
from clinic_booking.booking import BookingEngine
from clinic_booking.catalog import CatalogStore
from clinic_booking.clock import SystemClock
from clinic_booking.errors import AuthError, ValidationError
from clinic_booking.slots import DEFAULT_GRID, SlotGrid, to_local_naive
from clinic_booking.state import Appointment, Practitioner, Slot, Specialty
from clinic_booking.store import AppointmentStore


class BookingService:
    """Facade over catalog, availability, booking engine and queries."""

    def __init__(
        self,
        catalog: CatalogStore,
        store: AppointmentStore,
        clock=None,
        grid: SlotGrid = DEFAULT_GRID,
        engine: Optional[BookingEngine] = None
    ):
        self.catalog = catalog
        self.store = store
        self.clock = clock or SystemClock()
        self.grid = grid
        self.engine = engine or BookingEngine(store, grid=grid)

    @classmethod
    def from_database_url(cls, database_url: str, clock=None) -> "BookingService":
        return cls(
            catalog=CatalogStore.from_config(),
            store=AppointmentStore(database_url),
            clock=clock,
        )

    def now(self) -> datetime:
        return self.clock.now()

    def list_specialties(self) -> Sequence[Specialty]:
        return self.catalog.list_specialties()

    def list_practitioners(self, specialty_id: Optional[str] = None) -> Sequence[Practitioner]:
        return self.catalog.list_practitioners(specialty_id)

    def available_slots(self, practitioner_id: str, day: date) -> List[Slot]:
        """
        Raises:
            NotFoundError: Unknown practitioner
            DependencyError: Store unavailable
        """
        self.catalog.get_practitioner(practitioner_id)
        return availability.available_slots(
            self.store, practitioner_id, day, self.now(), self.grid
        )

    def book(
        self,
        account_id: str,
        practitioner_id: str,
        specialty_id: str,
        instant: datetime
    ) -> Appointment:
        """
        Book ``instant`` with a practitioner under a specialty.

        Raises:
            AuthError, ValidationError, NotFoundError, ConflictError,
            DependencyError
        """
        if not account_id:
            raise AuthError("An account is required to book an appointment")
        if not specialty_id:
            raise ValidationError("specialty_id is required")
        if not practitioner_id:
            raise ValidationError("practitioner_id is required")
        if instant is None:
            raise ValidationError("instant is required")

        specialty = self.catalog.get_specialty(specialty_id)
        practitioner = self.catalog.get_practitioner(practitioner_id)
        if practitioner.specialty_id != specialty.id:
            raise ValidationError(
                f"{practitioner.name} does not practice {specialty.name}"
            )

        slot = Slot(practitioner_id=practitioner_id, instant=to_local_naive(instant))
        return self.engine.book(account_id, slot, specialty_id, self.now())

    def cancel(self, account_id: str, appointment_id: str) -> Appointment:
        return self.engine.cancel(account_id, appointment_id, self.now())

    def complete(self, appointment_id: str) -> Appointment:
        """Hook for the external process that confirms visits took place."""
        return self.engine.complete(appointment_id, self.now())

    def upcoming(self, account_id: str, limit: Optional[int] = None) -> List[Appointment]:
        if not account_id:
            raise AuthError("An account is required to list appointments")
        appointments = self.store.list_for_account(account_id)
        if limit is not None:
            return queries.next_appointments(appointments, self.now(), limit)
        return queries.upcoming(appointments, self.now())

    def past(self, account_id: str) -> List[Appointment]:
        if not account_id:
            raise AuthError("An account is required to list appointments")
        return queries.past(self.store.list_for_account(account_id), self.now())
