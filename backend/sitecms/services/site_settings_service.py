"""Site settings versioning, merge rules and image lifecycle.

The service owns every transition of ``SiteSettings.is_active``. Edits mutate
the active row in place; restores append a new active row copied from an older
version. Images live in the object store and are reclaimed on a best-effort
basis whenever a field that references them is replaced or cleared.
"""
import copy
import secrets
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sitecms.core.config import settings
from sitecms.core.exceptions import NotFound, ValidationFailed
from sitecms.core.security import get_password_hash
from sitecms.db.models.admin import Admin
from sitecms.db.models.site_settings import SiteSettings
from sitecms.services.image_service import ImageService
from sitecms.services.query_features import QueryFeatures

logger = structlog.get_logger()

PLACEHOLDER_ADMIN_EMAIL = "placeholder-admin@example.com"


class FieldStrategy(str, Enum):
    """How an incoming value is combined with the stored one."""
    MERGE = "merge"        # shallow key-union, one level deep
    IMAGE = "image"        # replace, reclaiming the previous asset
    SEQUENCE = "sequence"  # replace the menu item list wholesale


UPDATE_DESCRIPTORS: Dict[str, FieldStrategy] = {
    "background_image": FieldStrategy.IMAGE,
    "hero_section_text": FieldStrategy.MERGE,
    "about_section_text": FieldStrategy.MERGE,
    "about_section_image": FieldStrategy.IMAGE,
    "contact_info": FieldStrategy.MERGE,
    "social_media": FieldStrategy.MERGE,
    "menu_main_text": FieldStrategy.MERGE,
    "menu_main_image": FieldStrategy.IMAGE,
    "menu_child_items": FieldStrategy.SEQUENCE,
}

# Display content carried over by a restore; menu content is not.
RESTORABLE_FIELDS = (
    "background_image",
    "hero_section_text",
    "about_section_text",
    "contact_info",
    "social_media",
)

# category -> settings column holding the image
IMAGE_FIELDS = {
    "background": "background_image",
    "about": "about_section_image",
    "menu_main": "menu_main_image",
}


def empty_image() -> Dict[str, Any]:
    return {"url": None, "assetId": None}


def default_background_image() -> Dict[str, Any]:
    return {"url": settings.DEFAULT_BACKGROUND_IMAGE_URL, "assetId": None}


def reset_image(field: str) -> Dict[str, Any]:
    return default_background_image() if field == "background_image" else empty_image()


def default_content() -> Dict[str, Any]:
    """Content of the record created when no settings exist yet."""
    return {
        "background_image": default_background_image(),
        "hero_section_text": {
            "title": "Welcome to Our Website",
            "subtitle": "Discover amazing features and services that will help you grow your business.",
            "buttonText": "Get Started",
        },
        "about_section_text": {
            "title": "About Us",
            "content": "We are a dedicated team committed to providing excellent services and solutions for our clients.",
            "mission": "Our mission is to deliver innovative solutions that exceed expectations.",
            "vision": "To be the leading provider of cutting-edge technology solutions.",
        },
        "about_section_image": empty_image(),
        "contact_info": {
            "email": "contact@example.com",
            "phone": "+1 (555) 123-4567",
            "address": "123 Business Street, City, State 12345",
        },
        "social_media": {},
        "menu_main_text": {},
        "menu_main_image": empty_image(),
        "menu_child_items": [],
    }


def shallow_merge(existing: Any, incoming: Any) -> Any:
    """Union of keys one level deep; anything that is not two dicts is replaced."""
    if isinstance(existing, dict) and isinstance(incoming, dict):
        return {**existing, **incoming}
    return copy.deepcopy(incoming)


def _asset_id(image: Optional[Dict[str, Any]]) -> Optional[str]:
    return (image or {}).get("assetId")


class SiteSettingsService:
    """Settings version manager."""

    def __init__(self, db: Session, images: ImageService):
        self.db = db
        self.images = images

    # -- reads -----------------------------------------------------------

    def get_active(self) -> Optional[SiteSettings]:
        return self.db.query(SiteSettings).filter(SiteSettings.is_active.is_(True)).first()

    def get_current(self, actor_id: Optional[int] = None) -> SiteSettings:
        """Return the active record, creating the default one if none exists."""
        current = self.get_active()
        if current is not None:
            return current
        record, _ = self._create_active(default_content(), self._bootstrap_actor_id(actor_id))
        return record

    def history(self, page: int = 1, limit: int = 10) -> Tuple[List[SiteSettings], Dict[str, Any]]:
        """All versions, most recently modified first."""
        features = QueryFeatures(
            self.db.query(SiteSettings),
            SiteSettings,
            {"page": page, "limit": limit},
            default_sort="-updated_at,-settings_id",
        ).paginate()
        records = features.all()
        return records, features.pagination_meta(features.count())

    # -- edits -----------------------------------------------------------

    def update(self, admin_id: int, partial: Dict[str, Any]) -> SiteSettings:
        """Apply a partial update (snake_case field names) to the active record."""
        unknown = set(partial) - set(UPDATE_DESCRIPTORS)
        if unknown:
            raise ValidationFailed(f"Unsupported settings fields: {sorted(unknown)}")

        current = self.get_active()
        if current is None:
            content, stale = self._apply_update(default_content(), partial)
            record, created = self._create_active(content, admin_id)
            if not created:
                # Lost a concurrent bootstrap; fold the update into the winner.
                return self.update(admin_id, partial)
        else:
            content, stale = self._apply_update(self._content_of(current), partial)
            for field, value in content.items():
                setattr(current, field, value)
            current.updated_by = admin_id
            record = self._save(current)

        self._reclaim(stale)
        logger.info("Site settings updated", settings_id=record.settings_id, admin_id=admin_id,
                    fields=sorted(partial))
        return record

    def restore(self, admin_id: int, settings_id: int) -> SiteSettings:
        """Create a new active version from an older version's display content."""
        target = self.db.get(SiteSettings, settings_id)
        if target is None:
            raise NotFound("Settings version not found")

        content = default_content()
        for field in RESTORABLE_FIELDS:
            content[field] = copy.deepcopy(getattr(target, field))

        restored = SiteSettings(**content, is_active=True, updated_by=admin_id)
        try:
            self.db.query(SiteSettings).filter(SiteSettings.is_active.is_(True)).update(
                {SiteSettings.is_active: False, SiteSettings.updated_at: SiteSettings.updated_at},
                synchronize_session="fetch",
            )
            self.db.add(restored)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(restored)
        logger.info("Site settings restored", settings_id=restored.settings_id,
                    source_id=settings_id, admin_id=admin_id)
        return restored

    # -- images ----------------------------------------------------------

    def replace_image(self, admin_id: int, category: str, file: Any) -> SiteSettings:
        """Validate, reclaim the old asset, upload the new one, persist."""
        field = IMAGE_FIELDS[category]
        upload = self.images.validate_image_file(file)

        record = self.get_current(admin_id)
        self.images.delete_image(_asset_id(getattr(record, field)))

        stored = self.images.upload_image(upload, category)
        setattr(record, field, {"url": stored.url, "assetId": stored.asset_id})
        record.updated_by = admin_id
        return self._save(record)

    def remove_image(self, admin_id: int, category: str) -> SiteSettings:
        field = IMAGE_FIELDS[category]
        record = self.get_current(admin_id)
        self.images.delete_image(_asset_id(getattr(record, field)))

        setattr(record, field, reset_image(field))
        record.updated_by = admin_id
        return self._save(record)

    # -- menu items ------------------------------------------------------

    def add_menu_child_item(
        self,
        admin_id: int,
        title: str,
        content: str,
        price: float,
        image_file: Any = None
    ) -> SiteSettings:
        image = empty_image()
        if image_file is not None:
            upload = self.images.validate_image_file(image_file)
            stored = self.images.upload_image(upload, "menu_item")
            image = {"url": stored.url, "assetId": stored.asset_id}

        record = self.get_current(admin_id)
        items = self._items_of(record)
        items.append({
            "id": uuid.uuid4().hex,
            "title": title,
            "content": content,
            "price": price,
            "image": image,
        })
        record.menu_child_items = items
        record.updated_by = admin_id
        return self._save(record)

    def update_menu_child_item(
        self,
        admin_id: int,
        index: int,
        changes: Dict[str, Any],
        image_file: Any = None
    ) -> SiteSettings:
        """Update title/content/price of an item, optionally swapping its image."""
        record = self.get_current(admin_id)
        items = self._items_of(record)
        item = items[self._check_index(items, index)]

        for key in ("title", "content", "price"):
            if changes.get(key) is not None:
                item[key] = changes[key]

        if image_file is not None:
            upload = self.images.validate_image_file(image_file)
            self.images.delete_image(_asset_id(item.get("image")))
            stored = self.images.upload_image(upload, "menu_item")
            item["image"] = {"url": stored.url, "assetId": stored.asset_id}

        record.menu_child_items = items
        record.updated_by = admin_id
        return self._save(record)

    def replace_menu_child_image(self, admin_id: int, index: int, file: Any) -> SiteSettings:
        if file is None:
            self.images.validate_image_file(file)
        return self.update_menu_child_item(admin_id, index, {}, image_file=file)

    def remove_menu_child_image(self, admin_id: int, index: int) -> SiteSettings:
        record = self.get_current(admin_id)
        items = self._items_of(record)
        item = items[self._check_index(items, index)]

        self.images.delete_image(_asset_id(item.get("image")))
        item["image"] = empty_image()

        record.menu_child_items = items
        record.updated_by = admin_id
        return self._save(record)

    def delete_menu_child_item(self, admin_id: int, index: int) -> SiteSettings:
        """Remove an item; later items shift down one position."""
        record = self.get_current(admin_id)
        items = self._items_of(record)
        removed = items.pop(self._check_index(items, index))

        self.images.delete_image(_asset_id(removed.get("image")))

        record.menu_child_items = items
        record.updated_by = admin_id
        return self._save(record)

    @staticmethod
    def find_menu_item_index(record: SiteSettings, item_id: str) -> int:
        for position, item in enumerate(record.menu_child_items or []):
            if item.get("id") == item_id:
                return position
        raise NotFound("Menu item not found")

    # -- internals -------------------------------------------------------

    def _apply_update(
        self,
        content: Dict[str, Any],
        partial: Dict[str, Any]
    ) -> Tuple[Dict[str, Any], List[str]]:
        """Combine ``partial`` into ``content`` per field strategy.

        Returns the changed fields and the asset ids no longer referenced.
        """
        changed: Dict[str, Any] = {}
        stale: List[str] = []

        for field, incoming in partial.items():
            strategy = UPDATE_DESCRIPTORS[field]
            existing = content.get(field)

            if strategy is FieldStrategy.MERGE:
                changed[field] = shallow_merge(existing, incoming)
            elif strategy is FieldStrategy.IMAGE:
                url = (incoming or {}).get("url")
                if url is not None and url == (existing or {}).get("url"):
                    # Same image sent back; keep its stored asset.
                    changed[field] = shallow_merge(existing, incoming)
                    continue
                new_image = {"url": url, "assetId": None} if url is not None else reset_image(field)
                if _asset_id(existing):
                    stale.append(_asset_id(existing))
                changed[field] = new_image
            else:
                items, dropped = self._replace_items(existing or [], incoming or [])
                changed[field] = items
                stale.extend(dropped)

        merged = dict(content)
        merged.update(changed)
        return merged, stale

    @staticmethod
    def _replace_items(
        existing: List[Dict[str, Any]],
        incoming: List[Dict[str, Any]]
    ) -> Tuple[List[Dict[str, Any]], List[str]]:
        previous = {item.get("id"): item for item in existing}
        items = []
        for entry in incoming:
            old = previous.get(entry.get("id"))
            image = entry.get("image")
            if image is None:
                image = copy.deepcopy(old["image"]) if old else empty_image()
            elif old and image.get("url") == (old.get("image") or {}).get("url"):
                image = copy.deepcopy(old["image"])
            else:
                image = {"url": image.get("url"), "assetId": None}

            items.append({
                "id": old["id"] if old else uuid.uuid4().hex,
                "title": entry["title"],
                "content": entry["content"],
                "price": entry["price"],
                "image": image,
            })

        kept = {_asset_id(item["image"]) for item in items}
        dropped = [
            _asset_id(item.get("image")) for item in existing
            if _asset_id(item.get("image")) and _asset_id(item.get("image")) not in kept
        ]
        return items, dropped

    def _reclaim(self, asset_ids: List[str]) -> None:
        for asset_id in asset_ids:
            self.images.delete_image(asset_id)

    @staticmethod
    def _content_of(record: SiteSettings) -> Dict[str, Any]:
        return {field: copy.deepcopy(getattr(record, field)) for field in UPDATE_DESCRIPTORS}

    @staticmethod
    def _items_of(record: SiteSettings) -> List[Dict[str, Any]]:
        return copy.deepcopy(record.menu_child_items or [])

    @staticmethod
    def _check_index(items: List[Dict[str, Any]], index: int) -> int:
        if index < 0 or index >= len(items):
            raise NotFound("Menu item not found")
        return index

    def _save(self, record: SiteSettings) -> SiteSettings:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def _create_active(self, content: Dict[str, Any], actor_id: int) -> Tuple[SiteSettings, bool]:
        """Insert a new active record; a concurrent creator wins ties.

        Returns the active record and whether this call created it.
        """
        record = SiteSettings(**content, is_active=True, updated_by=actor_id)
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_active()
            if existing is None:
                raise
            logger.info("Active settings created concurrently, using existing record",
                        settings_id=existing.settings_id)
            return existing, False

        self.db.refresh(record)
        logger.info("Site settings created", settings_id=record.settings_id, admin_id=actor_id)
        return record, True

    def _bootstrap_actor_id(self, actor_id: Optional[int]) -> int:
        if actor_id is not None:
            return actor_id

        admin = self.db.query(Admin).order_by(Admin.admin_id).first()
        if admin is not None:
            return admin.admin_id

        placeholder = Admin(
            name="Default Admin",
            email=PLACEHOLDER_ADMIN_EMAIL,
            password_hash=get_password_hash(secrets.token_urlsafe(32)),
            is_active=False,
        )
        self.db.add(placeholder)
        self.db.commit()
        self.db.refresh(placeholder)
        logger.info("Created placeholder admin for settings bootstrap", admin_id=placeholder.admin_id)
        return placeholder.admin_id
