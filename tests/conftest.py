"""Shared test fixtures."""
from datetime import datetime

import pytest

from clinic_booking.booking import BookingEngine
from clinic_booking.catalog import CatalogStore
from clinic_booking.clock import FixedClock
from clinic_booking.service import BookingService
from clinic_booking.state import Slot
from clinic_booking.store import AppointmentStore

START = datetime(2024, 1, 1, 7, 0)


@pytest.fixture(autouse=True)
def setup_env(monkeypatch):
    """Keep tests independent of the developer's environment."""
    monkeypatch.delenv("CANCELLATION_CUTOFF_HOURS", raising=False)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    yield


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at 2024-01-01 07:00."""
    return FixedClock(START)


@pytest.fixture
def store():
    """AppointmentStore on an in-memory database."""
    store = AppointmentStore(database_url="sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def catalog() -> CatalogStore:
    return CatalogStore.from_config()


@pytest.fixture
def engine(store) -> BookingEngine:
    return BookingEngine(store, cancellation_cutoff_hours=0)


@pytest.fixture
def service(catalog, store, clock, engine) -> BookingService:
    return BookingService(catalog=catalog, store=store, clock=clock, engine=engine)


@pytest.fixture
def slot_at():
    """Build a slot for practitioner 1 (or another) at a given time."""
    def _create(hour: int, minute: int = 0, day: datetime = START, practitioner_id: str = "1"):
        return Slot(
            practitioner_id=practitioner_id,
            instant=day.replace(hour=hour, minute=minute)
        )
    return _create
