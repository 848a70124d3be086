from eventgate.schemas.event import EventResponse, RegistrationSummary
from eventgate.schemas.registration import (
    AttendeeTarget,
    Outcome,
    RegistrationCreate,
    RegistrationError,
    RegistrationRead,
    RegistrationResult,
    UserRegistrationStatus,
)

__all__ = [
    "EventResponse", "RegistrationSummary",
    "AttendeeTarget", "Outcome", "RegistrationCreate", "RegistrationError",
    "RegistrationRead", "RegistrationResult", "UserRegistrationStatus",
]
