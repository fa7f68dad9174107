"""Booking Engine: the only writer of appointment state."""
import threading
import uuid
from datetime import datetime, timedelta
from typing import Optional

from clinic_booking import config
from clinic_booking.errors import (
    AuthError,
    ConflictError,
    InvalidStateError,
    OwnershipError,
    ValidationError,
)
from clinic_booking.logging_config import get_logger
from clinic_booking.slots import DEFAULT_GRID, SlotGrid, is_on_grid, to_local_naive, truncate_to_minute
from clinic_booking.state import (
    INITIAL_STATUS,
    Appointment,
    AppointmentStatus,
    Slot,
    validate_transition,
)
from clinic_booking.store import AppointmentStore

logger = get_logger(__name__)

# Fixed pool of slot locks; distinct slots may share a stripe
SLOT_LOCK_STRIPES = 64


def generate_appointment_id() -> str:
    return f"app_{uuid.uuid4().hex[:12]}"


class BookingEngine:
    """
    Creates, cancels and completes appointments.

    ``book`` is an atomic check-and-set per (practitioner, instant): an
    in-process lock serializes callers for the same slot and the store's
    unique index catches writers in other processes.
    """

    def __init__(
        self,
        store: AppointmentStore,
        grid: SlotGrid = DEFAULT_GRID,
        cancellation_cutoff_hours: Optional[int] = None
    ):
        self.store = store
        self.grid = grid
        if cancellation_cutoff_hours is None:
            cancellation_cutoff_hours = config.get_cancellation_cutoff_hours()
        self.cancellation_cutoff = timedelta(hours=cancellation_cutoff_hours)

        self._slot_locks = [threading.Lock() for _ in range(SLOT_LOCK_STRIPES)]

    def _slot_lock(self, practitioner_id: str, instant: datetime) -> threading.Lock:
        return self._slot_locks[hash((practitioner_id, instant)) % len(self._slot_locks)]

    def book(
        self,
        account_id: str,
        slot: Slot,
        specialty_id: str,
        now: datetime
    ) -> Appointment:
        """
        Reserve a slot for an account.

        ``slot.is_available`` is ignored: the slot may have been read long
        before this call, so freshness is re-checked against ``now`` and
        the store.

        Args:
            account_id: Acting account
            slot: Slot picked by the caller
            specialty_id: Specialty the visit is booked under
            now: Current time

        Returns:
            The new scheduled appointment

        Raises:
            AuthError: No acting account
            ValidationError: Missing selection, closed day, off-grid or non-future instant
            ConflictError: Slot already held by a scheduled appointment
        """
        if not account_id:
            raise AuthError("An account is required to book an appointment")

        if not specialty_id:
            raise ValidationError("specialty_id is required")
        if slot is None or not slot.practitioner_id:
            raise ValidationError("practitioner_id is required")
        if slot.instant is None:
            raise ValidationError("instant is required")

        instant = truncate_to_minute(to_local_naive(slot.instant))
        if not self.grid.is_open(instant.date()):
            raise ValidationError(
                f"The clinic is closed on {instant:%A}s; pick another day"
            )
        if not is_on_grid(instant, self.grid):
            raise ValidationError(
                f"{instant:%Y-%m-%d %H:%M} is not a bookable slot time"
            )
        if instant <= now:
            raise ValidationError(
                f"{instant:%Y-%m-%d %H:%M} is in the past; pick a future slot"
            )

        appointment = Appointment(
            id=generate_appointment_id(),
            account_id=account_id,
            practitioner_id=slot.practitioner_id,
            specialty_id=specialty_id,
            instant=instant,
            status=INITIAL_STATUS,
            created_at=now,
        )

        with self._slot_lock(slot.practitioner_id, instant):
            try:
                created = self.store.insert_scheduled(appointment)
            except ConflictError:
                logger.info(
                    "booking_conflict",
                    account_id=account_id,
                    practitioner_id=slot.practitioner_id,
                    instant=instant.isoformat(),
                )
                raise

        logger.info(
            "appointment_booked",
            appointment_id=created.id,
            account_id=account_id,
            practitioner_id=created.practitioner_id,
            instant=created.instant.isoformat(),
        )
        return created

    def cancel(self, account_id: str, appointment_id: str, now: datetime) -> Appointment:
        """
        Cancel one of the account's scheduled, future appointments.

        Raises:
            AuthError: No acting account
            NotFoundError: Unknown appointment
            OwnershipError: Appointment belongs to another account
            InvalidStateError: Not scheduled, already started, or inside
                the cancellation cutoff
        """
        if not account_id:
            raise AuthError("An account is required to cancel an appointment")

        appointment = self.store.get(appointment_id)

        if appointment.account_id != account_id:
            raise OwnershipError(f"Appointment {appointment_id} belongs to another account")

        self._check_transition(appointment, AppointmentStatus.CANCELLED)
        if appointment.instant <= now:
            raise InvalidStateError(
                f"Appointment {appointment_id} has already started and cannot be cancelled"
            )
        if self.cancellation_cutoff and appointment.instant - now < self.cancellation_cutoff:
            hours = int(self.cancellation_cutoff.total_seconds() // 3600)
            raise InvalidStateError(
                f"Appointments can only be cancelled at least {hours} hours in advance"
            )

        cancelled = self._apply(appointment, AppointmentStatus.CANCELLED)
        logger.info("appointment_cancelled", appointment_id=appointment_id, account_id=account_id)
        return cancelled

    def complete(self, appointment_id: str, now: datetime) -> Appointment:
        """
        Mark an elapsed scheduled appointment as completed.

        Called by an external confirmation process; the core never
        completes appointments on its own.

        Raises:
            NotFoundError: Unknown appointment
            InvalidStateError: Not scheduled or not yet started
        """
        appointment = self.store.get(appointment_id)

        self._check_transition(appointment, AppointmentStatus.COMPLETED)
        if appointment.instant > now:
            raise InvalidStateError(
                f"Appointment {appointment_id} has not taken place yet"
            )

        completed = self._apply(appointment, AppointmentStatus.COMPLETED)
        logger.info("appointment_completed", appointment_id=appointment_id)
        return completed

    def _check_transition(self, appointment: Appointment, intended: AppointmentStatus):
        if not validate_transition(appointment.status, intended):
            raise InvalidStateError(
                f"Appointment {appointment.id} is {appointment.status.value} "
                f"and cannot become {intended.value}"
            )

    def _apply(self, appointment: Appointment, intended: AppointmentStatus) -> Appointment:
        # Conditional update: a concurrent transition makes this one lose
        if not self.store.transition(appointment.id, appointment.status, intended):
            current = self.store.get(appointment.id)
            raise InvalidStateError(
                f"Appointment {appointment.id} is {current.status.value} "
                f"and cannot become {intended.value}"
            )
        return self.store.get(appointment.id)
