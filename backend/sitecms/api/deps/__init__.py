"""API dependencies package."""
from sitecms.api.deps.auth import get_current_admin, get_current_user
from sitecms.api.deps.database import get_db
from sitecms.api.deps.rate_limit import RateLimiter, auth_rate_limiter
from sitecms.api.deps.storage import get_image_service, get_object_storage, read_image_upload

__all__ = [
    "get_current_admin", "get_current_user", "get_db",
    "RateLimiter", "auth_rate_limiter",
    "get_image_service", "get_object_storage", "read_image_upload",
]
