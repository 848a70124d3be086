from eventgate.models.event import Event
from eventgate.models.registration import Registration, RegistrationStatus

__all__ = ["Event", "Registration", "RegistrationStatus"]
