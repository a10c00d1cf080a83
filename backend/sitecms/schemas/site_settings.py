"""Site settings schemas."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, ConfigDict, EmailStr, Field

from sitecms.schemas.common import ActorSummary, ApiModel
from sitecms.schemas.user import PHONE_PATTERN

IMAGE_SETTINGS_FIELDS = ("background_image", "about_section_image", "menu_main_image")


class SectionUpdate(ApiModel):
    """Partial section; only the keys sent are merged into the stored section."""

    model_config = ConfigDict(extra="forbid")


class HeroSectionUpdate(SectionUpdate):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    subtitle: Optional[str] = Field(None, min_length=1, max_length=200)
    button_text: Optional[str] = Field(None, max_length=30)


class AboutSectionUpdate(SectionUpdate):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1, max_length=1000)
    mission: Optional[str] = Field(None, max_length=500)
    vision: Optional[str] = Field(None, max_length=500)


class ContactInfoUpdate(SectionUpdate):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, max_length=200)


class SocialMediaUpdate(SectionUpdate):
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    linkedin: Optional[str] = None


class MenuMainTextUpdate(SectionUpdate):
    title: Optional[str] = Field(None, max_length=100)
    content: Optional[str] = Field(None, max_length=1000)


class ImageUrlUpdate(SectionUpdate):
    """Point an image field at an externally hosted URL; ``null`` resets it."""
    url: Optional[str] = None


class MenuChildItemIn(SectionUpdate):
    """Menu item inside a wholesale ``menuChildItems`` replacement."""
    id: Optional[str] = None
    title: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1, max_length=1000)
    price: float = Field(ge=0)
    image: Optional[ImageUrlUpdate] = None


class MenuChildItemUpdate(SectionUpdate):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1, max_length=1000)
    price: Optional[float] = Field(None, ge=0)


class SiteSettingsUpdate(ApiModel):
    """Body of ``PUT /admin/settings``; unknown top-level keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    background_image: Optional[ImageUrlUpdate] = None
    hero_section_text: Optional[HeroSectionUpdate] = None
    about_section_text: Optional[AboutSectionUpdate] = None
    about_section_image: Optional[ImageUrlUpdate] = None
    contact_info: Optional[ContactInfoUpdate] = None
    social_media: Optional[SocialMediaUpdate] = None
    menu_main_text: Optional[MenuMainTextUpdate] = None
    menu_main_image: Optional[ImageUrlUpdate] = None
    menu_child_items: Optional[List[MenuChildItemIn]] = None

    def to_partial(self) -> Dict[str, Any]:
        """Fields actually sent, keyed by column name, sections in stored camelCase."""
        partial: Dict[str, Any] = {}
        for field in self.model_fields_set:
            value = getattr(self, field)
            if value is None:
                if field in IMAGE_SETTINGS_FIELDS:
                    partial[field] = {"url": None}
                elif field == "menu_child_items":
                    partial[field] = []
                continue
            if isinstance(value, list):
                partial[field] = [item.model_dump(exclude_unset=True, by_alias=True) for item in value]
            else:
                partial[field] = value.model_dump(exclude_unset=True, by_alias=True)
        return partial


class ImageAsset(ApiModel):
    url: Optional[str] = None
    asset_id: Optional[str] = None


class MenuChildItem(ApiModel):
    id: Optional[str] = None
    title: str
    content: str
    price: float
    image: ImageAsset = Field(default_factory=ImageAsset)


class SiteSettingsResponse(ApiModel):
    """Schema for a settings version."""
    id: int = Field(validation_alias=AliasChoices("settings_id", "id"), serialization_alias="id")
    is_active: bool
    background_image: ImageAsset
    hero_section_text: Dict[str, Any]
    about_section_text: Optional[Dict[str, Any]] = None
    about_section_image: Optional[ImageAsset] = None
    contact_info: Optional[Dict[str, Any]] = None
    social_media: Optional[Dict[str, Any]] = None
    menu_main_text: Optional[Dict[str, Any]] = None
    menu_main_image: Optional[ImageAsset] = None
    menu_child_items: List[MenuChildItem] = Field(default_factory=list)
    updated_by: Optional[ActorSummary] = Field(
        None,
        validation_alias=AliasChoices("updated_by_admin", "updatedBy"),
        serialization_alias="updatedBy",
    )
    created_at: datetime
    updated_at: datetime


def serialize_settings(record) -> Dict[str, Any]:
    """JSON-ready representation of a SiteSettings row."""
    return SiteSettingsResponse.model_validate(record).model_dump(by_alias=True, mode="json")
