"""Mock object storage adapter for development and testing."""
import uuid
from pathlib import PurePosixPath
from typing import Dict

from sitecms.core.exceptions import UpstreamAssetError
from sitecms.services.adapters.object_storage.base import ObjectStorageAdapter, StoredObject


class MockStorageAdapter(ObjectStorageAdapter):
    """Keeps uploaded objects in memory."""

    def __init__(self, base_url: str = "https://storage.local"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, Dict] = {}
        self.deleted = []  # asset ids, in deletion order

    def test_connection(self) -> bool:
        """Mock always returns successful connection."""
        return True

    def upload(self, data: bytes, folder: str, filename: str, content_type: str) -> StoredObject:
        suffix = PurePosixPath(filename or "").suffix.lower()
        asset_id = f"{folder.strip('/')}/mock-{uuid.uuid4().hex}{suffix}"
        self.objects[asset_id] = {
            "data": data,
            "content_type": content_type,
            "filename": filename,
        }
        return StoredObject(url=f"{self.base_url}/{asset_id}", asset_id=asset_id)

    def delete(self, asset_id: str) -> None:
        if asset_id not in self.objects:
            raise UpstreamAssetError(f"Asset not found: {asset_id}")
        del self.objects[asset_id]
        self.deleted.append(asset_id)
