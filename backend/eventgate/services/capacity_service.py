"""
Capacity evaluation.

Only `registered` and `attended` registrations occupy a seat. Callers must
hold the event lock (see registration_store) so the count cannot go stale
between this check and their write.
"""

from eventgate.models.event import Event
from eventgate.models.registration import ADMITTED_STATUSES
from eventgate.services.interfaces.registration_store import RegistrationStore


async def admitted_count(store: RegistrationStore, event_id: int) -> int:
    return await store.count_by_status(event_id, ADMITTED_STATUSES)


async def is_at_capacity(store: RegistrationStore, event: Event) -> bool:
    if event.capacity is None:
        return False
    return await admitted_count(store, event.id) >= event.capacity
