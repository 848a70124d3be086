"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from eventgate.api.routes import events, registrations, organizer

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(events.router)
api_router.include_router(registrations.router)
api_router.include_router(organizer.router)
