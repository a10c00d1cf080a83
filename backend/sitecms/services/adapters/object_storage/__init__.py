"""Object storage adapters package."""
from sitecms.services.adapters.object_storage.base import ObjectStorageAdapter, StoredObject
from sitecms.services.adapters.object_storage.mock import MockStorageAdapter
from sitecms.services.adapters.object_storage.s3 import S3StorageAdapter

__all__ = ["ObjectStorageAdapter", "StoredObject", "MockStorageAdapter", "S3StorageAdapter"]
