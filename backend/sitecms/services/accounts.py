"""Admin and end-user account operations."""
from typing import Optional, Tuple

import structlog
from sqlalchemy.orm import Session

from sitecms.core.config import settings
from sitecms.core.exceptions import Conflict, NotFound, Unauthenticated, ValidationFailed
from sitecms.core.security import (
    create_admin_token,
    create_user_token,
    get_password_hash,
    verify_password,
)
from sitecms.db.base import utcnow
from sitecms.db.models.admin import Admin
from sitecms.db.models.user import User

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Incorrect email or password"


# -- admins --------------------------------------------------------------

def authenticate_admin(db: Session, email: str, password: str) -> Tuple[Admin, str]:
    """Check admin credentials, stamp last login and issue a token.

    Inactive admins are treated exactly like unknown ones.
    """
    admin = db.query(Admin).filter(
        Admin.email == email.lower(),
        Admin.is_active.is_(True)
    ).first()

    if not admin or not verify_password(password, admin.password_hash):
        logger.info("Admin login rejected", email=email)
        raise Unauthenticated(INVALID_CREDENTIALS)

    admin.last_login_at = utcnow()
    db.commit()
    db.refresh(admin)

    logger.info("Admin logged in", admin_id=admin.admin_id)
    return admin, create_admin_token(admin.admin_id)


def create_admin(db: Session, name: str, email: str, password: str) -> Admin:
    email = email.lower()
    if db.query(Admin).filter(Admin.email == email).first():
        raise Conflict("Admin with this email already exists")

    admin = Admin(name=name, email=email, password_hash=get_password_hash(password))
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Admin created", admin_id=admin.admin_id)
    return admin


def setup_first_admin(db: Session, name: str, email: str, password: str) -> Tuple[Admin, str]:
    """Create the first active admin; refused once one exists."""
    if db.query(Admin).filter(Admin.is_active.is_(True)).first():
        raise ValidationFailed("Admin setup has already been completed")

    admin = create_admin(db, name, email, password)
    return admin, create_admin_token(admin.admin_id)


def get_admin(db: Session, admin_id: int) -> Admin:
    admin = db.get(Admin, admin_id)
    if admin is None:
        raise NotFound("Admin not found")
    return admin


def ensure_initial_admin(db: Session) -> Optional[Admin]:
    """Create the admin configured through INITIAL_ADMIN_* if it does not exist."""
    if not (settings.INITIAL_ADMIN_EMAIL and settings.INITIAL_ADMIN_PASSWORD):
        return None

    email = settings.INITIAL_ADMIN_EMAIL.lower()
    existing = db.query(Admin).filter(Admin.email == email).first()
    if existing:
        return existing

    return create_admin(
        db,
        settings.INITIAL_ADMIN_NAME or "Administrator",
        email,
        settings.INITIAL_ADMIN_PASSWORD,
    )


# -- users ---------------------------------------------------------------

def register_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    phone: Optional[str] = None
) -> Tuple[User, str]:
    email = email.lower()
    if db.query(User).filter(User.email == email).first():
        raise Conflict("User with this email already exists")

    user = User(
        name=name,
        email=email,
        phone=phone,
        password_hash=get_password_hash(password)
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User registered", user_id=user.user_id)
    return user, create_user_token(user.user_id)


def authenticate_user(db: Session, email: str, password: str) -> Tuple[User, str]:
    user = db.query(User).filter(User.email == email.lower()).first()

    if not user or not verify_password(password, user.password_hash):
        raise Unauthenticated(INVALID_CREDENTIALS)

    if not user.is_active:
        raise Unauthenticated("Your account has been deactivated. Please contact support.")

    return user, create_user_token(user.user_id)


def update_user_profile(db: Session, user: User, changes: dict) -> User:
    """Apply name/email/phone changes; email must stay unique."""
    email = changes.get("email")
    if email:
        email = email.lower()
        clash = db.query(User).filter(User.email == email, User.user_id != user.user_id).first()
        if clash:
            raise Conflict("User with this email already exists")
        changes["email"] = email

    for field in ("name", "email", "phone"):
        if field in changes and changes[field] is not None:
            setattr(user, field, changes[field])

    db.commit()
    db.refresh(user)
    return user


def change_user_password(db: Session, user: User, current_password: str, new_password: str) -> str:
    """Replace the password and return a fresh token."""
    if not verify_password(current_password, user.password_hash):
        raise ValidationFailed("Your current password is incorrect")

    user.password_hash = get_password_hash(new_password)
    db.commit()

    logger.info("User password changed", user_id=user.user_id)
    return create_user_token(user.user_id)


def deactivate_user(db: Session, user: User) -> None:
    """Soft delete: the row stays, login is refused afterwards."""
    user.is_active = False
    db.commit()
    logger.info("User deactivated", user_id=user.user_id)
