"""Authentication dependencies for FastAPI."""
from typing import Optional, Tuple

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from sitecms.api.deps.database import get_db
from sitecms.core.config import settings
from sitecms.core.exceptions import Unauthenticated
from sitecms.core.security import ADMIN_SCOPE, USER_SCOPE, decode_access_token
from sitecms.db.models.admin import Admin
from sitecms.db.models.user import User

admin_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/admin/login",
    scheme_name="AdminToken",
    auto_error=False
)
user_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/users/login",
    scheme_name="UserToken",
    auto_error=False
)


def _resolve_subject(token: Optional[str], scope: str) -> Tuple[int, dict]:
    payload = decode_access_token(token) if token else None
    if payload is None or payload.get("scope") != scope:
        raise Unauthenticated("You are not logged in! Please log in to get access.")

    try:
        return int(payload.get("sub")), payload
    except (TypeError, ValueError):
        raise Unauthenticated("Could not validate credentials")


async def get_current_admin(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(admin_oauth2_scheme)
) -> Admin:
    """Resolve the bearer token to an active admin."""
    admin_id, _ = _resolve_subject(token, ADMIN_SCOPE)

    admin = db.get(Admin, admin_id)
    if admin is None or not admin.is_active:
        raise Unauthenticated("The admin belonging to this token does no longer exist.")
    return admin


async def get_current_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(user_oauth2_scheme)
) -> User:
    """Resolve the bearer token to an active end user."""
    user_id, _ = _resolve_subject(token, USER_SCOPE)

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated("The user belonging to this token does no longer exist.")
    return user
