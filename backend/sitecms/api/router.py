"""API router configuration."""
from fastapi import APIRouter
from sitecms.api.endpoints import admin, admin_settings, users

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(admin.router)
api_router.include_router(admin_settings.router)
api_router.include_router(users.router)
