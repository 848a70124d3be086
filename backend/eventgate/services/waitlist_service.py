"""
Waitlist promotion.

The waitlist is FIFO: oldest `registered_at` first, registration id breaks
ties. `promote_next` runs inside the caller's locked transaction (a
cancellation), `fill_open_slots` opens its own.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.models.event import Event
from eventgate.models.registration import Registration, RegistrationStatus
from eventgate.schemas.registration import Outcome, RegistrationError, RegistrationResult
from eventgate.services.capacity_service import is_at_capacity
from eventgate.services.interfaces.registration_store import RegistrationStore
from eventgate.services.registration_store import SqlAlchemyRegistrationStore
from eventgate.services.results import reject, store_failure
from eventgate.core.metrics import record_outcome, record_promotions, registration_latency
from eventgate.core.logging import get_logger

logger = get_logger(__name__)


async def promote_next(store: RegistrationStore, event: Event) -> Optional[Registration]:
    """
    Move the earliest waitlisted registration to `registered`.

    No-op when the waitlist is empty or when the event is still full, which
    happens if its capacity was lowered after people were admitted.
    """
    if await is_at_capacity(store, event):
        return None

    candidates = await store.list_by_status(event.id, RegistrationStatus.WAITLIST, limit=1)
    if not candidates:
        return None

    registration = await store.update_registration(candidates[0], status=RegistrationStatus.REGISTERED)
    logger.info(
        "waitlist_promoted",
        registration_id=registration.id,
        event_id=event.id,
        user_id=registration.user_id,
    )
    return registration


async def fill_open_slots(db: AsyncSession, event_id: int) -> RegistrationResult:
    """
    Promote waitlisted users until the event is full or the waitlist is empty.
    Organizers run this after raising an event's capacity.
    """
    store = SqlAlchemyRegistrationStore(db)
    try:
        with registration_latency.labels(operation="promote").time():
            event = await store.lock_event(event_id)
            if event is None:
                return await reject(
                    db, "promote", RegistrationError.EVENT_NOT_FOUND,
                    f"Event {event_id} not found", event_id=event_id,
                )

            promoted = []
            while True:
                registration = await promote_next(store, event)
                if registration is None:
                    break
                promoted.append(registration)

            await db.commit()
    except SQLAlchemyError as e:
        return await store_failure(db, "promote", "Failed to promote from waitlist", e, event_id=event_id)

    record_promotions(len(promoted))
    record_outcome("promote", Outcome.PROMOTED.value)
    logger.info("waitlist_filled", event_id=event_id, promoted=len(promoted))
    return RegistrationResult.ok(
        Outcome.PROMOTED,
        f"Promoted {len(promoted)} registration(s) from the waitlist",
        promoted=promoted,
    )
