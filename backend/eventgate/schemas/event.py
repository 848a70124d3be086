"""
Pydantic schemas for event reads and registration summaries.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    date: date
    timezone: Optional[str]
    location: Optional[str]
    capacity: Optional[int]
    registration_type: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RegistrationSummary(BaseModel):
    event_id: int
    capacity: Optional[int]
    registered_count: int
    waitlist_count: int
    invited_count: int
    at_capacity: bool
    spots_remaining: Optional[int]
    cached: bool = False
