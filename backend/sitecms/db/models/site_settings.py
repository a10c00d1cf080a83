"""Versioned site settings model.

Every row is one version of the public site configuration. Exactly one row has
``is_active`` set; older rows are kept as history and never deleted.
"""
from sqlalchemy import Column, Integer, Boolean, ForeignKey, Index, JSON, text
from sqlalchemy.orm import relationship
from sitecms.db.base import Base


class SiteSettings(Base):
    """One version of the site settings document."""

    __tablename__ = "site_settings"
    __table_args__ = (
        Index("ix_site_settings_updated_at", "updated_at"),
        # Only one active row; MySQL has no partial indexes and relies on the
        # transactional restore instead.
        Index(
            "uq_site_settings_single_active",
            "is_active",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ).ddl_if(dialect=("sqlite", "postgresql")),
    )

    settings_id = Column(Integer, primary_key=True, autoincrement=True)
    background_image = Column(JSON, nullable=False)
    hero_section_text = Column(JSON, nullable=False)
    about_section_text = Column(JSON, nullable=True)
    about_section_image = Column(JSON, nullable=True)
    contact_info = Column(JSON, nullable=True)
    social_media = Column(JSON, nullable=True)
    menu_main_text = Column(JSON, nullable=True)
    menu_main_image = Column(JSON, nullable=True)
    menu_child_items = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    updated_by = Column(Integer, ForeignKey("admins.admin_id"), nullable=False)

    updated_by_admin = relationship("Admin", lazy="joined")

    def __repr__(self) -> str:
        return f"<SiteSettings(settings_id={self.settings_id}, is_active={self.is_active})>"
