"""Database models package."""
from sitecms.db.models.admin import Admin
from sitecms.db.models.user import User
from sitecms.db.models.site_settings import SiteSettings

__all__ = [
    "Admin",
    "User",
    "SiteSettings",
]
