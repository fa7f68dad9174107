"""SQLAlchemy database models for the appointment store."""
from sqlalchemy import Column, DateTime, Index, String, text
from sqlalchemy.orm import declarative_base

from clinic_booking.state import Appointment, AppointmentStatus

Base = declarative_base()

SCHEDULED_ONLY = text("status = 'scheduled'")


class AppointmentRecord(Base):
    """Appointment table. Rows are never deleted, only status-updated."""
    __tablename__ = "appointments"
    __table_args__ = (
        # At most one scheduled appointment per practitioner and instant
        Index(
            "uq_scheduled_slot",
            "practitioner_id",
            "instant",
            unique=True,
            sqlite_where=SCHEDULED_ONLY,
            postgresql_where=SCHEDULED_ONLY,
        ),
        Index("ix_appointments_practitioner_instant", "practitioner_id", "instant"),
    )

    id = Column(String(64), primary_key=True)
    account_id = Column(String(255), nullable=False, index=True)
    practitioner_id = Column(String(64), nullable=False)
    specialty_id = Column(String(64), nullable=False)
    instant = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value)
    created_at = Column(DateTime, nullable=False)

    def to_domain(self) -> Appointment:
        return Appointment(
            id=self.id,
            account_id=self.account_id,
            practitioner_id=self.practitioner_id,
            specialty_id=self.specialty_id,
            instant=self.instant,
            status=AppointmentStatus(self.status),
            created_at=self.created_at,
        )

    def __repr__(self):
        return (
            f"<AppointmentRecord(id={self.id}, practitioner={self.practitioner_id}, "
            f"instant={self.instant}, status={self.status})>"
        )
