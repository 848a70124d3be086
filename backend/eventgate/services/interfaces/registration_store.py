"""
Registration store interface.
Keeps admission logic independent of how registrations are persisted.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional, Sequence

from eventgate.models.event import Event
from eventgate.models.registration import Registration


class RegistrationStore(ABC):
    """
    Storage operations the admission core depends on.

    Every method runs inside the caller's current transaction; committing
    and rolling back belong to the service that opened it.
    """

    @abstractmethod
    async def get_event(self, event_id: int) -> Optional[Event]:
        """Read an event without locking it."""

    @abstractmethod
    async def lock_event(self, event_id: int) -> Optional[Event]:
        """
        Read an event and take its exclusive per-event lock.

        The lock is held until the surrounding transaction ends. Returns
        None if the event does not exist.
        """

    @abstractmethod
    async def find_registration(self, event_id: int, user_id: int) -> Optional[Registration]:
        """The user's registration for the event in any status, cancelled included."""

    @abstractmethod
    async def count_by_status(self, event_id: int, statuses: Iterable[str]) -> int:
        pass

    @abstractmethod
    async def list_by_status(
        self,
        event_id: int,
        status: str,
        limit: Optional[int] = None,
    ) -> Sequence[Registration]:
        """Registrations in `status`, oldest `registered_at` first, ties by id."""

    @abstractmethod
    async def count_waitlisted_before(self, registration: Registration) -> int:
        """How many waitlisted registrations would be promoted before this one."""

    @abstractmethod
    async def insert_registration(
        self,
        event_id: int,
        user_id: int,
        status: str,
        registered_at: datetime,
        invite_code_used: Optional[str] = None,
    ) -> Registration:
        pass

    @abstractmethod
    async def update_registration(self, registration: Registration, **fields) -> Registration:
        pass
