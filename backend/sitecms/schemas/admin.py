"""Admin schemas."""
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, EmailStr, Field, field_validator

from sitecms.schemas.common import ApiModel


class AdminLogin(ApiModel):
    """Schema for admin login."""
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class AdminCreate(AdminLogin):
    """Schema for the initial admin setup."""
    name: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=8)


class AdminResponse(ApiModel):
    """Schema for admin response."""
    id: int = Field(validation_alias=AliasChoices("admin_id", "id"), serialization_alias="id")
    name: str
    email: str
    is_active: bool = True
    last_login_at: Optional[datetime] = None


class AdminToken(ApiModel):
    """Token issued on admin login or setup."""
    token: str
    admin: AdminResponse
