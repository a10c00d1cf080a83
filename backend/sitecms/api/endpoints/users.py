"""End-user account endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sitecms.api.deps import auth_rate_limiter, get_current_user, get_db
from sitecms.api.responses import format_response
from sitecms.db.models.user import User
from sitecms.schemas.user import (
    UserLogin,
    UserPasswordUpdate,
    UserRegister,
    UserResponse,
    UserToken,
    UserUpdate,
)
from sitecms.services import accounts

router = APIRouter(prefix="/users", tags=["Users"])


def _user_payload(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(by_alias=True, mode="json")


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limiter)]
)
async def register(
    user_in: UserRegister,
    db: Session = Depends(get_db)
):
    """Register a new user and log them in."""
    user, token = accounts.register_user(db, user_in.name, user_in.email, user_in.password, user_in.phone)
    payload = UserToken(token=token, user=UserResponse.model_validate(user))
    return format_response("User registered successfully", payload.model_dump(by_alias=True, mode="json"))


@router.post("/login", dependencies=[Depends(auth_rate_limiter)])
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """Authenticate a user and return a JWT."""
    user, token = accounts.authenticate_user(db, credentials.email, credentials.password)
    payload = UserToken(token=token, user=UserResponse.model_validate(user))
    return format_response("Login successful", payload.model_dump(by_alias=True, mode="json"))


@router.post("/logout")
async def logout():
    """Logout user (client should discard token)."""
    return format_response("Logged out successfully")


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return format_response("Profile retrieved successfully", {"user": _user_payload(current_user)})


@router.patch("/profile")
async def update_profile(
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = accounts.update_user_profile(db, current_user, user_in.model_dump(exclude_unset=True))
    return format_response("Profile updated successfully", {"user": _user_payload(user)})


@router.delete("/profile")
async def delete_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Deactivate the current account; it is kept but can no longer log in."""
    accounts.deactivate_user(db, current_user)
    return format_response("Account deactivated successfully")


@router.patch("/update-password")
async def update_password(
    passwords: UserPasswordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Change the password; the response carries a fresh token."""
    token = accounts.change_user_password(db, current_user, passwords.current_password, passwords.password)
    payload = UserToken(token=token, user=UserResponse.model_validate(current_user))
    return format_response("Password updated successfully", payload.model_dump(by_alias=True, mode="json"))
