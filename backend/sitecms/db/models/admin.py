"""Administrator account model."""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from sitecms.db.base import Base


class Admin(Base):
    """Administrator allowed to edit site settings."""

    __tablename__ = "admins"
    __table_args__ = (
        Index("ix_admins_is_active", "is_active"),
    )

    admin_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Admin(admin_id={self.admin_id}, email='{self.email}')>"
