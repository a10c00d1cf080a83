"""Pydantic schemas package."""
from sitecms.schemas.common import ApiModel, ActorSummary
from sitecms.schemas.admin import AdminLogin, AdminCreate, AdminResponse, AdminToken
from sitecms.schemas.user import (
    UserRegister, UserLogin, UserUpdate, UserPasswordUpdate, UserResponse, UserToken
)
from sitecms.schemas.site_settings import (
    HeroSectionUpdate, AboutSectionUpdate, MenuMainTextUpdate, MenuChildItemUpdate,
    SiteSettingsUpdate, SiteSettingsResponse, serialize_settings
)

__all__ = [
    "ApiModel", "ActorSummary",
    "AdminLogin", "AdminCreate", "AdminResponse", "AdminToken",
    "UserRegister", "UserLogin", "UserUpdate", "UserPasswordUpdate", "UserResponse", "UserToken",
    "HeroSectionUpdate", "AboutSectionUpdate", "MenuMainTextUpdate", "MenuChildItemUpdate",
    "SiteSettingsUpdate", "SiteSettingsResponse", "serialize_settings",
]
