"""
Registration service: admission, cancellation and attendance check-in.

ADMISSION ORDER
===============

Each request is decided under the event lock, in this order:

  1. An active registration for (event, user) exists  -> already_registered
  2. invite_only event and missing / wrong code       -> invite_required /
                                                         invalid_invite_code
  3. closed event (a valid code does not reopen it)   -> registration_closed
  4. End of the event's day has passed                -> event_in_past
  5. Admitted count >= capacity                       -> waitlist, else registered
  6. A cancelled row for this user is reused in place, otherwise a new row
     is inserted

Rejections are results, not exceptions; they write nothing. Database errors roll the whole
operation back and come back as store_failure, so callers can retry:
step 1 makes a repeated register call harmless.

Cancelling a seat-holding registration (registered / attended) promotes the
head of the waitlist in the same transaction. Cancelling a waitlisted or
invited registration frees no seat and promotes nobody.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.models.registration import ADMITTED_STATUSES, RegistrationStatus
from eventgate.schemas.event import RegistrationSummary
from eventgate.schemas.registration import (
    Outcome,
    RegistrationError,
    RegistrationRead,
    RegistrationResult,
    UserRegistrationStatus,
)
from eventgate.services.capacity_service import admitted_count, is_at_capacity
from eventgate.services.event_service import is_event_in_past
from eventgate.services.invite_service import check_invite_code
from eventgate.services.registration_store import SqlAlchemyRegistrationStore
from eventgate.services.results import reject, store_failure
from eventgate.services.waitlist_service import promote_next
from eventgate.core.metrics import record_outcome, record_promotions, registration_latency
from eventgate.core.logging import get_logger

logger = get_logger(__name__)

INVITE_MESSAGES = {
    RegistrationError.INVITE_REQUIRED: "This event requires an invite code",
    RegistrationError.INVALID_INVITE_CODE: "Invalid invite code",
}


async def register_for_event(
    db: AsyncSession,
    event_id: int,
    user_id: int,
    invite_code: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RegistrationResult:
    """Admit, waitlist or reject a registration request."""
    now = now or datetime.now(timezone.utc)
    store = SqlAlchemyRegistrationStore(db)
    context = {"event_id": event_id, "user_id": user_id}

    try:
        with registration_latency.labels(operation="register").time():
            event = await store.lock_event(event_id)
            if event is None:
                return await reject(
                    db, "register", RegistrationError.EVENT_NOT_FOUND,
                    f"Event {event_id} not found", **context,
                )

            existing = await store.find_registration(event_id, user_id)
            if existing is not None and existing.is_active:
                return await reject(
                    db, "register", RegistrationError.ALREADY_REGISTERED,
                    "You are already registered for this event", registration=existing, **context,
                )

            invite_error = check_invite_code(event, invite_code)
            if invite_error is not None:
                return await reject(db, "register", invite_error, INVITE_MESSAGES[invite_error], **context)

            if event.registration_type == "closed":
                return await reject(
                    db, "register", RegistrationError.REGISTRATION_CLOSED,
                    "Registration is closed for this event", **context,
                )

            if is_event_in_past(event, now):
                return await reject(
                    db, "register", RegistrationError.EVENT_IN_PAST,
                    "Cannot register for past events", **context,
                )

            status = RegistrationStatus.WAITLIST if await is_at_capacity(store, event) else RegistrationStatus.REGISTERED

            if existing is not None:
                registration = await store.update_registration(
                    existing,
                    status=status,
                    invite_code_used=invite_code or None,
                    registered_at=now,
                )
            else:
                registration = await store.insert_registration(
                    event_id=event_id,
                    user_id=user_id,
                    status=status,
                    registered_at=now,
                    invite_code_used=invite_code or None,
                )
            await db.commit()
    except SQLAlchemyError as e:
        return await store_failure(db, "register", "Failed to register for event", e, **context)

    if status == RegistrationStatus.WAITLIST:
        outcome, message = Outcome.WAITLISTED, "You have been added to the waitlist"
    else:
        outcome, message = Outcome.ADMITTED, "Successfully registered for event"

    record_outcome("register", outcome.value)
    logger.info(
        "registration_created",
        registration_id=registration.id,
        status=registration.status,
        reused=existing is not None,
        **context,
    )
    return RegistrationResult.ok(outcome, message, registration)


async def cancel_registration(db: AsyncSession, event_id: int, user_id: int) -> RegistrationResult:
    """Cancel the user's registration and hand a freed seat to the waitlist."""
    store = SqlAlchemyRegistrationStore(db)
    context = {"event_id": event_id, "user_id": user_id}

    try:
        with registration_latency.labels(operation="cancel").time():
            event = await store.lock_event(event_id)
            if event is None:
                return await reject(
                    db, "cancel", RegistrationError.EVENT_NOT_FOUND,
                    f"Event {event_id} not found", **context,
                )

            registration = await store.find_registration(event_id, user_id)
            if registration is None or not registration.is_active:
                return await reject(
                    db, "cancel", RegistrationError.NOT_REGISTERED,
                    "You are not registered for this event", **context,
                )

            previous_status = registration.status
            registration = await store.update_registration(registration, status=RegistrationStatus.CANCELLED)

            promoted = []
            if previous_status in ADMITTED_STATUSES:
                next_in_line = await promote_next(store, event)
                if next_in_line is not None:
                    promoted.append(next_in_line)

            await db.commit()
    except SQLAlchemyError as e:
        return await store_failure(db, "cancel", "Failed to cancel registration", e, **context)

    record_outcome("cancel", Outcome.CANCELLED.value)
    record_promotions(len(promoted))
    logger.info(
        "registration_cancelled",
        registration_id=registration.id,
        previous_status=previous_status,
        promoted=[r.id for r in promoted],
        **context,
    )
    return RegistrationResult.ok(Outcome.CANCELLED, "Registration cancelled", registration, promoted)


async def check_in(db: AsyncSession, event_id: int, user_id: int) -> RegistrationResult:
    """
    Mark a registered user as attended.
    Both statuses hold a seat, so capacity is unaffected.
    """
    store = SqlAlchemyRegistrationStore(db)
    context = {"event_id": event_id, "user_id": user_id}

    try:
        with registration_latency.labels(operation="check_in").time():
            event = await store.lock_event(event_id)
            if event is None:
                return await reject(
                    db, "check_in", RegistrationError.EVENT_NOT_FOUND,
                    f"Event {event_id} not found", **context,
                )

            registration = await store.find_registration(event_id, user_id)
            if registration is not None and registration.status == RegistrationStatus.ATTENDED.value:
                return await reject(
                    db, "check_in", RegistrationError.ALREADY_CHECKED_IN,
                    "User has already checked in", registration=registration, **context,
                )
            if registration is None or registration.status != RegistrationStatus.REGISTERED.value:
                return await reject(
                    db, "check_in", RegistrationError.NOT_REGISTERED,
                    "User is not registered for this event", registration=registration, **context,
                )

            registration = await store.update_registration(registration, status=RegistrationStatus.ATTENDED)
            await db.commit()
    except SQLAlchemyError as e:
        return await store_failure(db, "check_in", "Failed to check in", e, **context)

    record_outcome("check_in", Outcome.CHECKED_IN.value)
    logger.info("registration_checked_in", registration_id=registration.id, **context)
    return RegistrationResult.ok(Outcome.CHECKED_IN, "Checked in", registration)


async def get_user_registration(db: AsyncSession, event_id: int, user_id: int) -> UserRegistrationStatus:
    """The user's registration in any status, with their place in line if waitlisted."""
    store = SqlAlchemyRegistrationStore(db)
    registration = await store.find_registration(event_id, user_id)
    if registration is None:
        return UserRegistrationStatus(event_id=event_id, user_id=user_id)

    position = None
    if registration.status == RegistrationStatus.WAITLIST.value:
        position = await store.count_waitlisted_before(registration) + 1

    return UserRegistrationStatus(
        event_id=event_id,
        user_id=user_id,
        registration=RegistrationRead.model_validate(registration),
        waitlist_position=position,
    )


async def get_registration_summary(db: AsyncSession, event_id: int) -> Optional[RegistrationSummary]:
    """Seat and waitlist counts for an event. None if the event does not exist."""
    store = SqlAlchemyRegistrationStore(db)
    event = await store.get_event(event_id)
    if event is None:
        return None

    registered = await admitted_count(store, event_id)
    waitlisted = await store.count_by_status(event_id, [RegistrationStatus.WAITLIST])
    invited = await store.count_by_status(event_id, [RegistrationStatus.INVITED])

    if event.capacity is None:
        at_capacity, remaining = False, None
    else:
        at_capacity = registered >= event.capacity
        remaining = max(event.capacity - registered, 0)

    return RegistrationSummary(
        event_id=event_id,
        capacity=event.capacity,
        registered_count=registered,
        waitlist_count=waitlisted,
        invited_count=invited,
        at_capacity=at_capacity,
        spots_remaining=remaining,
    )
