"""Appointment persistence on SQLAlchemy."""
import math
import threading
from contextlib import nullcontext
from datetime import date, datetime
from typing import Callable, List, Optional, Set, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_booking import config
from clinic_booking.circuit_breaker import CircuitBreaker, CircuitBreakerOpen
from clinic_booking.database import create_db_engine, init_database
from clinic_booking.database_models import AppointmentRecord
from clinic_booking.errors import ConflictError, DependencyError, NotFoundError
from clinic_booking.logging_config import get_logger
from clinic_booking.slots import day_bounds
from clinic_booking.state import Appointment, AppointmentStatus

logger = get_logger(__name__)

T = TypeVar("T")


class AppointmentStore:
    """
    Durable appointment records.

    Responsibilities:
    - Atomic insert of scheduled appointments (check-and-set per slot)
    - Conditional status updates
    - Snapshot reads: every read is a single SELECT

    Infrastructure failures surface as DependencyError. Only the Booking
    Engine should call the mutating methods.
    """

    def __init__(self, database_url: str, breaker: Optional[CircuitBreaker] = None):
        """
        Initialize store with database connection.

        Args:
            database_url: SQLAlchemy connection string
            breaker: Circuit breaker for store calls (default from config)
        """
        self.engine = create_db_engine(database_url)
        init_database(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=config.STORE_FAILURE_THRESHOLD,
            timeout=config.STORE_RETRY_TIMEOUT_SECONDS,
            failure_exceptions=(SQLAlchemyError,),
        )
        # A StaticPool shares one connection; sessions must not interleave on it
        if isinstance(self.engine.pool, StaticPool):
            self._connection_guard = threading.RLock()
        else:
            self._connection_guard = nullcontext()

    def close(self):
        self.engine.dispose()

    def _run(self, operation: str, func: Callable[[], T]) -> T:
        try:
            with self._connection_guard:
                return self.breaker.call(func)
        except CircuitBreakerOpen as e:
            raise DependencyError(
                "Appointment store temporarily unavailable",
                retry_after=math.ceil(e.retry_after)
            ) from e
        except SQLAlchemyError as e:
            logger.error("store_failure", operation=operation, error=str(e))
            raise DependencyError(f"Appointment store failure during {operation}") from e

    def insert_scheduled(self, appointment: Appointment) -> Appointment:
        """
        Insert a scheduled appointment unless its slot is already held.

        The existence check and the insert run in one transaction; the
        partial unique index rejects a concurrent winner from another
        process.

        Raises:
            ConflictError: A scheduled appointment already holds the slot
        """
        def _insert() -> Appointment:
            with self.SessionLocal() as db:
                taken = db.execute(
                    select(AppointmentRecord.id).where(
                        AppointmentRecord.practitioner_id == appointment.practitioner_id,
                        AppointmentRecord.instant == appointment.instant,
                        AppointmentRecord.status == AppointmentStatus.SCHEDULED.value,
                    )
                ).first()
                if taken:
                    raise ConflictError(
                        f"Slot {appointment.instant:%Y-%m-%d %H:%M} is already booked"
                    )

                record = AppointmentRecord(
                    id=appointment.id,
                    account_id=appointment.account_id,
                    practitioner_id=appointment.practitioner_id,
                    specialty_id=appointment.specialty_id,
                    instant=appointment.instant,
                    status=appointment.status.value,
                    created_at=appointment.created_at,
                )
                db.add(record)
                try:
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    raise ConflictError(
                        f"Slot {appointment.instant:%Y-%m-%d %H:%M} is already booked"
                    )
                return record.to_domain()

        return self._run("insert_scheduled", _insert)

    def get(self, appointment_id: str) -> Appointment:
        """
        Raises:
            NotFoundError: If no appointment has this id
        """
        def _get() -> Optional[Appointment]:
            with self.SessionLocal() as db:
                record = db.get(AppointmentRecord, appointment_id)
                return record.to_domain() if record else None

        appointment = self._run("get", _get)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appointment

    def transition(
        self,
        appointment_id: str,
        from_status: AppointmentStatus,
        to_status: AppointmentStatus
    ) -> bool:
        """
        Move an appointment from one status to another.

        Conditional update: returns False when the row is no longer in
        ``from_status`` (someone else got there first).
        """
        def _transition() -> bool:
            with self.SessionLocal() as db:
                result = db.execute(
                    update(AppointmentRecord)
                    .where(
                        AppointmentRecord.id == appointment_id,
                        AppointmentRecord.status == from_status.value,
                    )
                    .values(status=to_status.value)
                )
                db.commit()
                return result.rowcount == 1

        return self._run("transition", _transition)

    def scheduled_instants(self, practitioner_id: str, day: date) -> Set[datetime]:
        """Instants of a practitioner's scheduled appointments on ``day``."""
        start, end = day_bounds(day)

        def _instants() -> Set[datetime]:
            with self.SessionLocal() as db:
                rows = db.execute(
                    select(AppointmentRecord.instant).where(
                        AppointmentRecord.practitioner_id == practitioner_id,
                        AppointmentRecord.status == AppointmentStatus.SCHEDULED.value,
                        AppointmentRecord.instant >= start,
                        AppointmentRecord.instant < end,
                    )
                ).scalars().all()
                return set(rows)

        return self._run("scheduled_instants", _instants)

    def list_for_account(self, account_id: str) -> List[Appointment]:
        """All appointments of an account, any status, unordered."""
        def _list() -> List[Appointment]:
            with self.SessionLocal() as db:
                records = db.execute(
                    select(AppointmentRecord).where(
                        AppointmentRecord.account_id == account_id
                    )
                ).scalars().all()
                return [r.to_domain() for r in records]

        return self._run("list_for_account", _list)
