"""
SQLAlchemy implementation of the registration store.

LOCKING
=======

Problem:
  Two users request the last seat at the same time. Both COUNT the admitted
  registrations, both see count < capacity, both INSERT as registered.
  Result: capacity exceeded. The same race lets two cancellations promote
  the same waitlisted user, or let a new registration grab a seat that a
  cancellation is about to hand to the waitlist.

Solution:
  Every capacity-affecting operation starts with

    SELECT ... FROM events WHERE id = :event_id FOR UPDATE

  and keeps that row lock until it commits or rolls back. The event row is
  the per-event mutex: operations on the same event run one at a time,
  operations on different events never wait on each other. COUNT, waitlist
  scan and write all happen after the lock is taken, so the decision can
  never be made on a stale count.

  SQLite ignores FOR UPDATE. Its engines start every transaction with
  BEGIN IMMEDIATE instead (see eventgate.db.session), so the database write
  lock is held from the lock_event read until commit. That serializes all
  writers, not just those on one event.
"""

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Sequence

from sqlalchemy import select, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.models.event import Event
from eventgate.models.registration import Registration, RegistrationStatus
from eventgate.services.interfaces.registration_store import RegistrationStore


def _plain(value):
    return value.value if isinstance(value, Enum) else value


class SqlAlchemyRegistrationStore(RegistrationStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_event(self, event_id: int) -> Optional[Event]:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        return result.scalar_one_or_none()

    async def lock_event(self, event_id: int) -> Optional[Event]:
        result = await self.db.execute(
            select(Event)
            .where(Event.id == event_id)
            .with_for_update()
            # Re-read columns under the lock even if the event is already in the session
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_registration(self, event_id: int, user_id: int) -> Optional[Registration]:
        result = await self.db.execute(
            select(Registration)
            .where(
                Registration.event_id == event_id,
                Registration.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def count_by_status(self, event_id: int, statuses: Iterable[str]) -> int:
        statuses = [_plain(s) for s in statuses]
        result = await self.db.execute(
            select(func.count())
            .select_from(Registration)
            .where(
                Registration.event_id == event_id,
                Registration.status.in_(statuses),
            )
        )
        return result.scalar_one()

    async def list_by_status(
        self,
        event_id: int,
        status: str,
        limit: Optional[int] = None,
    ) -> Sequence[Registration]:
        query = (
            select(Registration)
            .where(
                Registration.event_id == event_id,
                Registration.status == _plain(status),
            )
            .order_by(Registration.registered_at.asc(), Registration.id.asc())
            .execution_options(populate_existing=True)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_waitlisted_before(self, registration: Registration) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Registration)
            .where(
                Registration.event_id == registration.event_id,
                Registration.status == RegistrationStatus.WAITLIST.value,
                or_(
                    Registration.registered_at < registration.registered_at,
                    and_(
                        Registration.registered_at == registration.registered_at,
                        Registration.id < registration.id,
                    ),
                ),
            )
        )
        return result.scalar_one()

    async def insert_registration(
        self,
        event_id: int,
        user_id: int,
        status: str,
        registered_at: datetime,
        invite_code_used: Optional[str] = None,
    ) -> Registration:
        registration = Registration(
            event_id=event_id,
            user_id=user_id,
            status=_plain(status),
            invite_code_used=invite_code_used,
            registered_at=registered_at,
        )
        self.db.add(registration)
        await self.db.flush()
        await self.db.refresh(registration)
        return registration

    async def update_registration(self, registration: Registration, **fields) -> Registration:
        for name, value in fields.items():
            setattr(registration, name, _plain(value))
        await self.db.flush()
        await self.db.refresh(registration)
        return registration
