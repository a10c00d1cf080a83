"""Image upload validation and object-store lifecycle for site settings."""
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Optional

import structlog

from sitecms.core.config import settings
from sitecms.core.exceptions import UploadRejected
from sitecms.services.adapters.object_storage import (
    MockStorageAdapter,
    ObjectStorageAdapter,
    S3StorageAdapter,
    StoredObject,
)

logger = structlog.get_logger()

# Logical folder per image category
IMAGE_FOLDERS = {
    "background": "backgrounds",
    "about": "about",
    "menu_main": "menu",
    "menu_item": "menu-items",
}


@dataclass
class ImageUpload:
    """An uploaded file already read into memory."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class ImageService:
    """Validates uploads and talks to the object store."""

    def __init__(
        self,
        storage: ObjectStorageAdapter,
        max_file_size: Optional[int] = None,
        allowed_types: Optional[List[str]] = None
    ):
        self.storage = storage
        self.max_file_size = max_file_size or settings.MAX_FILE_SIZE
        self.allowed_types = allowed_types or settings.ALLOWED_IMAGE_TYPES

    def validate_image_file(self, file: Any) -> ImageUpload:
        """Check presence, cardinality, MIME type and size of an upload."""
        if file is None:
            raise UploadRejected("No file uploaded")

        if isinstance(file, (list, tuple)):
            if len(file) == 0:
                raise UploadRejected("No file uploaded")
            if len(file) > 1:
                raise UploadRejected("Multiple files not allowed")
            file = file[0]

        if not isinstance(file, ImageUpload) or not file.filename or not file.content_type or not file.size:
            raise UploadRejected("Invalid file information")

        if file.content_type not in self.allowed_types:
            raise UploadRejected("Only JPEG, PNG, and WebP images are allowed")

        if file.size > self.max_file_size:
            raise UploadRejected(
                f"File size too large. Maximum size is {self.max_file_size / 1024 / 1024:g}MB"
            )

        return file

    def upload_image(self, file: ImageUpload, category: str) -> StoredObject:
        """Upload an already validated image under the category's folder."""
        folder = f"{settings.STORAGE_FOLDER_ROOT}/{IMAGE_FOLDERS[category]}"
        return self.storage.upload(file.data, folder, file.filename, file.content_type)

    def delete_image(self, asset_id: Optional[str]) -> bool:
        """Best-effort delete; failures are logged and never raised."""
        if not asset_id:
            return False
        try:
            self.storage.delete(asset_id)
            return True
        except Exception as e:
            logger.warning("Failed to delete image from object storage", asset_id=asset_id, error=str(e))
            return False


@lru_cache
def get_storage_adapter() -> ObjectStorageAdapter:
    """Process-wide storage adapter selected by STORAGE_PROVIDER."""
    if settings.STORAGE_PROVIDER == "s3":
        return S3StorageAdapter()
    return MockStorageAdapter()
