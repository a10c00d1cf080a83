"""Site settings endpoints (admin only)."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Query
from sqlalchemy.orm import Session

from sitecms.api.deps import get_current_admin, get_db, get_image_service, read_image_upload
from sitecms.api.responses import format_response
from sitecms.core.exceptions import NotFound, ValidationFailed
from sitecms.db.models.admin import Admin
from sitecms.schemas.site_settings import (
    AboutSectionUpdate,
    HeroSectionUpdate,
    MenuChildItemUpdate,
    MenuMainTextUpdate,
    SiteSettingsUpdate,
    serialize_settings,
)
from sitecms.services.image_service import ImageService
from sitecms.services.site_settings_service import SiteSettingsService

router = APIRouter(prefix="/admin/settings", tags=["Site Settings"])


def get_settings_service(
    db: Session = Depends(get_db),
    images: ImageService = Depends(get_image_service)
) -> SiteSettingsService:
    return SiteSettingsService(db, images)


def _parse_index(raw: str) -> int:
    """Non-numeric indices are malformed (400); negative ones are out of range (404)."""
    try:
        index = int(raw)
    except ValueError:
        raise ValidationFailed("Invalid item index")
    if index < 0:
        raise NotFound("Menu item not found")
    return index


def _settings_response(message: str, record) -> Dict[str, Any]:
    return format_response(message, {"settings": serialize_settings(record)})


@router.get("")
async def get_current_settings(
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    """Get the active settings version, creating the default one if needed."""
    record = service.get_current(current_admin.admin_id)
    return _settings_response("Site settings retrieved successfully", record)


@router.put("")
async def update_settings(
    settings_in: SiteSettingsUpdate,
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    """Partially update the active settings.

    Sections are merged key by key; image fields and ``menuChildItems`` are replaced.
    """
    record = service.update(current_admin.admin_id, settings_in.to_partial())
    return _settings_response("Site settings updated successfully", record)


@router.get("/history")
async def get_settings_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    """All settings versions, most recently modified first."""
    records, meta = service.history(page, limit)
    return format_response(
        "Settings history retrieved successfully",
        {"settings": [serialize_settings(record) for record in records]},
        meta=meta
    )


@router.post("/restore/{settings_id}")
async def restore_settings(
    settings_id: int,
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    """Activate a copy of an older version's display content."""
    record = service.restore(current_admin.admin_id, settings_id)
    return _settings_response("Site settings restored successfully", record)


# -- sections ------------------------------------------------------------

@router.put("/hero-section")
async def update_hero_section(
    section: HeroSectionUpdate,
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    partial = {"hero_section_text": section.model_dump(exclude_none=True, by_alias=True)}
    record = service.update(current_admin.admin_id, partial)
    return _settings_response("Hero section updated successfully", record)


@router.put("/about-section")
async def update_about_section(
    section: AboutSectionUpdate,
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    partial = {"about_section_text": section.model_dump(exclude_none=True, by_alias=True)}
    record = service.update(current_admin.admin_id, partial)
    return _settings_response("About section updated successfully", record)


@router.put("/menu-main-text")
async def update_menu_main_text(
    section: MenuMainTextUpdate,
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    partial = {"menu_main_text": section.model_dump(exclude_none=True, by_alias=True)}
    record = service.update(current_admin.admin_id, partial)
    return _settings_response("Menu main text updated successfully", record)


# -- images --------------------------------------------------------------

@router.put("/background-image")
async def upload_background_image(
    image=Depends(read_image_upload),
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.replace_image(current_admin.admin_id, "background", image)
    return _settings_response("Background image updated successfully", record)


@router.delete("/background-image")
async def remove_background_image(
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.remove_image(current_admin.admin_id, "background")
    return _settings_response("Background image removed successfully", record)


@router.put("/about-section-image")
async def upload_about_section_image(
    image=Depends(read_image_upload),
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.replace_image(current_admin.admin_id, "about", image)
    return _settings_response("About section image updated successfully", record)


@router.delete("/about-section-image")
async def remove_about_section_image(
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.remove_image(current_admin.admin_id, "about")
    return _settings_response("About section image removed successfully", record)


@router.put("/menu-main-image")
async def upload_menu_main_image(
    image=Depends(read_image_upload),
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.replace_image(current_admin.admin_id, "menu_main", image)
    return _settings_response("Menu main image updated successfully", record)


@router.delete("/menu-main-image")
async def remove_menu_main_image(
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.remove_image(current_admin.admin_id, "menu_main")
    return _settings_response("Menu main image removed successfully", record)


# -- menu items ----------------------------------------------------------

@router.post("/menu-items")
async def add_menu_child_item(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    image=Depends(read_image_upload),
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    """Append a menu item; the ``image`` part is optional."""
    if not title or not content or price is None:
        raise ValidationFailed("Title, content, and price are required")

    item = MenuChildItemUpdate(title=title, content=content, price=price)
    record = service.add_menu_child_item(
        current_admin.admin_id, item.title, item.content, item.price, image_file=image
    )
    return _settings_response("Menu item added successfully", record)


@router.put("/menu-items/{item_index}")
async def update_menu_child_item(
    item_index: str,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    image=Depends(read_image_upload),
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    index = _parse_index(item_index)
    changes = MenuChildItemUpdate(title=title or None, content=content or None, price=price)
    record = service.update_menu_child_item(
        current_admin.admin_id, index, changes.model_dump(exclude_none=True), image_file=image
    )
    return _settings_response("Menu item updated successfully", record)


@router.delete("/menu-items/{item_index}")
async def delete_menu_child_item(
    item_index: str,
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.delete_menu_child_item(current_admin.admin_id, _parse_index(item_index))
    return _settings_response("Menu item deleted successfully", record)


@router.put("/menu-items/{item_index}/image")
async def upload_menu_child_image(
    item_index: str,
    image=Depends(read_image_upload),
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.replace_menu_child_image(current_admin.admin_id, _parse_index(item_index), image)
    return _settings_response("Menu item image updated successfully", record)


@router.delete("/menu-items/{item_index}/image")
async def remove_menu_child_image(
    item_index: str,
    current_admin: Admin = Depends(get_current_admin),
    service: SiteSettingsService = Depends(get_settings_service)
):
    record = service.remove_menu_child_image(current_admin.admin_id, _parse_index(item_index))
    return _settings_response("Menu item image removed successfully", record)
