"""Configuration for the clinic booking core.

Reference data and scheduling policy live here as plain module data;
deployment settings come from the environment (see .env.example).
"""
import os

SPECIALTIES = [
    {"id": "1", "name": "Cardiología"},
    {"id": "2", "name": "Dermatología"},
    {"id": "3", "name": "Pediatría"},
    {"id": "4", "name": "Ginecología"},
    {"id": "5", "name": "Oftalmología"},
    {"id": "6", "name": "Traumatología"},
]

PRACTITIONERS = [
    {"id": "1", "name": "Dr. Carlos Gutiérrez", "specialty_id": "1"},
    {"id": "2", "name": "Dra. Laura Martínez", "specialty_id": "1"},
    {"id": "3", "name": "Dr. Miguel Sánchez", "specialty_id": "2"},
    {"id": "4", "name": "Dra. Ana López", "specialty_id": "3"},
    {"id": "5", "name": "Dr. Roberto Fernández", "specialty_id": "4"},
    {"id": "6", "name": "Dra. Julia García", "specialty_id": "5"},
    {"id": "7", "name": "Dr. Eduardo Torres", "specialty_id": "6"},
]

# Same grid for every practitioner: first start 08:00, last start 17:30
SLOT_GRID = {
    "start_time": "08:00",
    "end_time": "18:00",
    "slot_duration_minutes": 30,
}

# Weekdays with no slots at all (date.weekday(): Monday=0 ... Sunday=6)
CLOSED_WEEKDAYS = [6]

# From this hour on, the booking screen defaults to tomorrow
NEXT_DAY_CUTOVER_HOUR = 17

UPCOMING_PREVIEW_LIMIT = 3

# Store circuit breaker
STORE_FAILURE_THRESHOLD = 5
STORE_RETRY_TIMEOUT_SECONDS = 30


def get_database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///appointments.db")


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO")


def get_cancellation_cutoff_hours() -> int:
    """
    Minimum notice (hours) required to cancel an appointment.

    0 disables the cutoff. The patient-facing copy mentions 24 hours but
    it has never been enforced; set CANCELLATION_CUTOFF_HOURS=24 to do so.
    """
    return int(os.getenv("CANCELLATION_CUTOFF_HOURS", "0"))
