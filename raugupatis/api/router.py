"""
API Router - Combines all route modules.
"""
from fastapi import APIRouter

from .routes import admin, fermentations, users

# Main API router
api_router = APIRouter(prefix="/api")

# Include all route modules
api_router.include_router(users.router)
api_router.include_router(fermentations.router)
api_router.include_router(admin.router)
