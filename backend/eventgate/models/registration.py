"""
Registration model: one row per (event, user), never deleted.

Key design decisions:
- Unique constraint on (event_id, user_id); re-registering after a
  cancellation updates the existing row instead of inserting a duplicate
- `registered_at` is refreshed on re-registration and is the waitlist
  ordering key, with `id` as the deterministic tie-breaker
- `registered` and `attended` both occupy a seat; `invited` never does
"""

from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship

from eventgate.db.base import Base, TimestampMixin


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    WAITLIST = "waitlist"
    CANCELLED = "cancelled"
    ATTENDED = "attended"
    INVITED = "invited"


# Statuses that occupy a seat toward the event's capacity
ADMITTED_STATUSES = (RegistrationStatus.REGISTERED.value, RegistrationStatus.ATTENDED.value)


class Registration(Base, TimestampMixin):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=RegistrationStatus.REGISTERED.value)
    invite_code_used = Column(String(64), nullable=True)
    registered_at = Column(DateTime(timezone=True), nullable=False)

    event = relationship("Event", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_registration_event_user"),
        CheckConstraint(
            "status IN ('registered', 'waitlist', 'cancelled', 'attended', 'invited')",
            name="check_registration_status",
        ),
        # Covers both the capacity COUNT and the FIFO waitlist scan
        Index("ix_registrations_event_status_registered_at", "event_id", "status", "registered_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.status != RegistrationStatus.CANCELLED.value

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, event={self.event_id}, user={self.user_id}, status={self.status})>"
