"""
Pydantic schemas for registration requests and the uniform operation result.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Outcome(str, Enum):
    ADMITTED = "admitted"
    WAITLISTED = "waitlisted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    INVITED = "invited"
    CHECKED_IN = "checked_in"
    PROMOTED = "promoted"


class RegistrationError(str, Enum):
    ALREADY_REGISTERED = "already_registered"
    INVITE_REQUIRED = "invite_required"
    INVALID_INVITE_CODE = "invalid_invite_code"
    REGISTRATION_CLOSED = "registration_closed"
    EVENT_IN_PAST = "event_in_past"
    NOT_REGISTERED = "not_registered"
    EVENT_NOT_FOUND = "event_not_found"
    ALREADY_CHECKED_IN = "already_checked_in"
    STORE_FAILURE = "store_failure"


class RegistrationCreate(BaseModel):
    invite_code: Optional[str] = Field(None, max_length=64)


class AttendeeTarget(BaseModel):
    """Body for organizer operations acting on another user."""
    user_id: int = Field(..., gt=0)


class RegistrationRead(BaseModel):
    id: int
    event_id: int
    user_id: int
    status: str
    invite_code_used: Optional[str]
    registered_at: datetime

    model_config = {"from_attributes": True}


class RegistrationResult(BaseModel):
    success: bool
    message: str
    outcome: Optional[Outcome] = None
    reason: Optional[RegistrationError] = None
    registration: Optional[RegistrationRead] = None
    promoted: list[RegistrationRead] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def ok(cls, outcome: Outcome, message: str, registration=None, promoted=()) -> "RegistrationResult":
        return cls(
            success=True,
            message=message,
            outcome=outcome,
            registration=RegistrationRead.model_validate(registration) if registration is not None else None,
            promoted=[RegistrationRead.model_validate(r) for r in promoted],
        )

    @classmethod
    def rejected(
        cls,
        reason: RegistrationError,
        message: str,
        registration=None,
        error: Optional[str] = None,
    ) -> "RegistrationResult":
        return cls(
            success=False,
            message=message,
            outcome=Outcome.REJECTED,
            reason=reason,
            registration=RegistrationRead.model_validate(registration) if registration is not None else None,
            error=error,
        )


class UserRegistrationStatus(BaseModel):
    event_id: int
    user_id: int
    registration: Optional[RegistrationRead] = None
    waitlist_position: Optional[int] = None
