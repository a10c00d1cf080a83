"""API endpoints package."""
from sitecms.api.endpoints import admin, admin_settings, users

__all__ = ["admin", "admin_settings", "users"]
