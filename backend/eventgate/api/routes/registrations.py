"""
Self-service registration endpoints for the authenticated user.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.api.responses import result_response
from eventgate.db.session import get_db
from eventgate.schemas.registration import RegistrationCreate, RegistrationResult, UserRegistrationStatus
from eventgate.services.registration_service import (
    register_for_event,
    cancel_registration,
    get_user_registration,
)
from eventgate.services.cache_service import invalidate_summary
from eventgate.core.security import get_current_user_id

router = APIRouter(prefix="/events/{event_id}/registrations", tags=["Registrations"])


@router.post("", response_model=RegistrationResult)
async def register_endpoint(
    event_id: int,
    payload: Optional[RegistrationCreate] = Body(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Register for an event.

    201 when a seat was granted, 202 when placed on the waitlist. Rejections
    carry the reason in the body (409 already registered, 403 invite or
    closed, 400 past event).
    """
    invite_code = payload.invite_code if payload else None
    result = await register_for_event(db, event_id, user_id, invite_code)
    if result.success:
        await invalidate_summary(event_id)
    return result_response(result)


@router.delete("/me", response_model=RegistrationResult)
async def cancel_endpoint(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Cancel your registration. A freed seat goes to the head of the waitlist."""
    result = await cancel_registration(db, event_id, user_id)
    if result.success:
        await invalidate_summary(event_id)
    return result_response(result)


@router.get("/me", response_model=UserRegistrationStatus)
async def my_registration_endpoint(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Your registration in any status, with your waitlist position if queued."""
    return await get_user_registration(db, event_id, user_id)
