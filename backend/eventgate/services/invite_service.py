"""
Invite gate: invite-code checks for invite-only events, and organizer-issued
invitations that bypass admission.

Invited registrations do not occupy a seat and never join the waitlist.
Whether the caller may issue invitations is decided by the identity layer
before `invite_user` is reached.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.models.event import Event
from eventgate.models.registration import RegistrationStatus
from eventgate.schemas.registration import Outcome, RegistrationError, RegistrationResult
from eventgate.services.registration_store import SqlAlchemyRegistrationStore
from eventgate.services.results import reject, store_failure
from eventgate.core.metrics import record_outcome, registration_latency
from eventgate.core.logging import get_logger

logger = get_logger(__name__)


def invite_code_matches(event: Event, invite_code: str) -> bool:
    """Case-insensitive comparison against the event's code."""
    if not event.invite_code:
        return False
    return invite_code.lower() == event.invite_code.lower()


def check_invite_code(event: Event, invite_code: Optional[str]) -> Optional[RegistrationError]:
    """Return the rejection reason for the supplied code, or None if it passes."""
    if event.registration_type != "invite_only":
        return None
    if not invite_code:
        return RegistrationError.INVITE_REQUIRED
    if not invite_code_matches(event, invite_code):
        return RegistrationError.INVALID_INVITE_CODE
    return None


async def invite_user(
    db: AsyncSession,
    event_id: int,
    user_id: int,
    now: Optional[datetime] = None,
) -> RegistrationResult:
    now = now or datetime.now(timezone.utc)
    store = SqlAlchemyRegistrationStore(db)
    try:
        with registration_latency.labels(operation="invite").time():
            event = await store.lock_event(event_id)
            if event is None:
                return await reject(
                    db, "invite", RegistrationError.EVENT_NOT_FOUND,
                    f"Event {event_id} not found", event_id=event_id, user_id=user_id,
                )

            # Any existing row blocks an invite, a cancelled one included
            existing = await store.find_registration(event_id, user_id)
            if existing is not None:
                return await reject(
                    db, "invite", RegistrationError.ALREADY_REGISTERED,
                    "User already has a registration", registration=existing,
                    event_id=event_id, user_id=user_id, status=existing.status,
                )

            registration = await store.insert_registration(
                event_id=event_id,
                user_id=user_id,
                status=RegistrationStatus.INVITED,
                registered_at=now,
            )
            await db.commit()
    except SQLAlchemyError as e:
        return await store_failure(
            db, "invite", "Failed to create invite", e, event_id=event_id, user_id=user_id,
        )

    record_outcome("invite", Outcome.INVITED.value)
    logger.info("invite_created", registration_id=registration.id, event_id=event_id, user_id=user_id)
    return RegistrationResult.ok(Outcome.INVITED, "Invite created", registration)
