"""
Event read endpoints. The summary is cached in Redis; the event itself is not.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.db.session import get_db
from eventgate.schemas.event import EventResponse, RegistrationSummary
from eventgate.services.event_service import get_event
from eventgate.services.registration_service import get_registration_summary
from eventgate.services.cache_service import get_cached_summary, set_cached_summary
from eventgate.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single event by ID."""
    event = await get_event(db, event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {event_id} not found",
        )
    return event


@router.get("/{event_id}/summary", response_model=RegistrationSummary)
async def get_summary_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """
    Seat, waitlist and invite counts.
    Served from cache when possible; writes to the event invalidate it.
    """
    cached = await get_cached_summary(event_id)
    if cached:
        cached["cached"] = True
        return RegistrationSummary(**cached)

    summary = await get_registration_summary(db, event_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {event_id} not found",
        )

    await set_cached_summary(event_id, summary.model_dump())
    return summary
