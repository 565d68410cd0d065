"""
API Router.

Aggregates all endpoint routers under /api.
"""

from fastapi import APIRouter

from notes_api.api import health
from notes_api.api.endpoints import auth, notes

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(notes.router, prefix="/notes", tags=["notes"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
