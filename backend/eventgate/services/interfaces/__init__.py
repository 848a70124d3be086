"""
Service interfaces for dependency inversion.
Allows swapping storage implementations without changing business logic.
"""

from .registration_store import RegistrationStore

__all__ = ['RegistrationStore']
