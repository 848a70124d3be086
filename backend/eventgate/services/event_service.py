"""
Event reads and the registration-window rule.

Events are owned by the event-management service; this module never
creates or edits them.
"""

from datetime import datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.models.event import Event
from eventgate.core.config import get_settings
from eventgate.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


async def get_event(db: AsyncSession, event_id: int) -> Optional[Event]:
    """Get a single event by ID, or None."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    return result.scalar_one_or_none()


def event_zone(event: Event) -> ZoneInfo:
    name = event.timezone or settings.DEFAULT_EVENT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("event_timezone_unknown", event_id=event.id, timezone=name)
        return ZoneInfo(settings.DEFAULT_EVENT_TIMEZONE)


def registration_deadline(event: Event) -> datetime:
    """Last instant of the event's calendar day, in the event's own timezone."""
    return datetime.combine(event.date, time.max, tzinfo=event_zone(event))


def is_event_in_past(event: Event, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return registration_deadline(event) < now
