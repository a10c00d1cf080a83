"""End-user account model."""
from sqlalchemy import Column, Integer, String, Boolean
from sitecms.db.base import Base


class User(Base):
    """Website end user."""

    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, email='{self.email}')>"
