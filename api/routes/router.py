"""
API router.

Aggregates all endpoints under /api.
"""

from fastapi import APIRouter

from . import auth, users, system

router = APIRouter()

# Include all route modules
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(system.router, prefix="/system", tags=["System"])
