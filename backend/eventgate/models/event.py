"""
Event model as published by the event-management service.

This service only reads events. Key design decisions:
- `date` is a calendar day; registration stays open until the end of that
  day in the event's own `timezone`
- NULL `capacity` means unlimited
- The event row doubles as the per-event lock for admission decisions
  (SELECT ... FOR UPDATE), so all capacity-affecting writes for one event
  are serialized while different events never contend
"""

from sqlalchemy import Column, Integer, String, Date, Index, CheckConstraint
from sqlalchemy.orm import relationship

from eventgate.db.base import Base, TimestampMixin

REGISTRATION_TYPES = ("open", "invite_only", "closed")


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    date = Column(Date, nullable=False)
    timezone = Column(String(64), nullable=True)
    location = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=True)
    registration_type = Column(String(20), nullable=False, default="open")
    invite_code = Column(String(64), nullable=True)
    organizer_id = Column(Integer, nullable=True)

    registrations = relationship("Registration", back_populates="event", lazy="raise")

    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="check_event_capacity_non_negative"),
        CheckConstraint(
            "registration_type IN ('open', 'invite_only', 'closed')",
            name="check_event_registration_type",
        ),
        Index("ix_events_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, type={self.registration_type}, capacity={self.capacity})>"
