"""
Organizer-only endpoints. The bearer token must carry the organizer role;
the services themselves do not check privileges.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.api.responses import result_response
from eventgate.db.session import get_db
from eventgate.schemas.registration import AttendeeTarget, RegistrationResult
from eventgate.services.invite_service import invite_user
from eventgate.services.registration_service import check_in
from eventgate.services.waitlist_service import fill_open_slots
from eventgate.services.cache_service import invalidate_summary
from eventgate.core.security import Principal, require_organizer
from eventgate.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events/{event_id}", tags=["Organizer"])


@router.post("/invitations", response_model=RegistrationResult)
async def invite_endpoint(
    event_id: int,
    target: AttendeeTarget,
    organizer: Principal = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    """Issue an invitation. Invited users bypass capacity and the waitlist."""
    logger.info("invite_requested", event_id=event_id, user_id=target.user_id, organizer_id=organizer.user_id)
    result = await invite_user(db, event_id, target.user_id)
    if result.success:
        await invalidate_summary(event_id)
    return result_response(result)


@router.post("/check-ins", response_model=RegistrationResult)
async def check_in_endpoint(
    event_id: int,
    target: AttendeeTarget,
    organizer: Principal = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    """Mark a registered user as attended."""
    result = await check_in(db, event_id, target.user_id)
    return result_response(result)


@router.post("/waitlist/promote", response_model=RegistrationResult)
async def promote_endpoint(
    event_id: int,
    organizer: Principal = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    """Fill every open seat from the waitlist, e.g. after capacity was raised."""
    result = await fill_open_slots(db, event_id)
    if result.success and result.promoted:
        await invalidate_summary(event_id)
    return result_response(result)
