"""User schemas."""
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, EmailStr, Field, field_validator, model_validator

from sitecms.schemas.common import ApiModel

PHONE_PATTERN = r"^\+?[\d\s\-()]{7,20}$"


class UserRegister(ApiModel):
    """Schema for self-registration."""
    name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    password: str = Field(min_length=8)
    password_confirm: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirm:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(ApiModel):
    """Schema for user login."""
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserUpdate(ApiModel):
    """Schema for profile updates; password changes use UserPasswordUpdate."""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value


class UserPasswordUpdate(ApiModel):
    """Schema for changing the current user's password."""
    current_password: str = Field(min_length=1)
    password: str = Field(min_length=8)
    password_confirm: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirm:
            raise ValueError("Passwords do not match")
        return self


class UserResponse(ApiModel):
    """Schema for user response."""
    id: int = Field(validation_alias=AliasChoices("user_id", "id"), serialization_alias="id")
    name: str
    email: str
    phone: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class UserToken(ApiModel):
    """Token issued on registration, login or password change."""
    token: str
    user: UserResponse
