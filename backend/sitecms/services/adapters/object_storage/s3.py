"""S3-compatible object storage adapter (AWS S3, Cloudflare R2, MinIO)."""
import uuid
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import quote

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from sitecms.core.config import settings
from sitecms.core.exceptions import InternalError, UpstreamAssetError
from sitecms.services.adapters.object_storage.base import ObjectStorageAdapter, StoredObject

logger = structlog.get_logger()


def _encode_object_key_for_url(object_key: str) -> str:
    """URL-encode each path segment while keeping '/' separators."""
    return "/".join(quote(segment, safe="") for segment in object_key.split("/"))


class S3StorageAdapter(ObjectStorageAdapter):
    """Stores images in an S3-compatible bucket with public read URLs."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client=None
    ):
        self.bucket = bucket or settings.STORAGE_BUCKET_NAME
        if not self.bucket:
            raise ValueError("STORAGE_BUCKET_NAME is not set.")

        self.endpoint_url = endpoint_url or settings.STORAGE_ENDPOINT_URL or None
        self.public_base_url = (public_base_url or settings.STORAGE_PUBLIC_BASE_URL).rstrip("/")

        self.client = client or boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=settings.STORAGE_REGION,
            aws_access_key_id=settings.STORAGE_ACCESS_KEY_ID,
            aws_secret_access_key=settings.STORAGE_SECRET_ACCESS_KEY,
            config=Config(signature_version="s3v4")
        )
        logger.info("Object storage initialized", bucket=self.bucket, endpoint=self.endpoint_url)

    def test_connection(self) -> bool:
        try:
            self.client.head_bucket(Bucket=self.bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning("Object storage connection test failed", bucket=self.bucket, error=str(e))
            return False

    def public_url(self, object_key: str) -> str:
        encoded = _encode_object_key_for_url(object_key)
        if self.public_base_url:
            return f"{self.public_base_url}/{encoded}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{encoded}"
        return f"https://{self.bucket}.s3.amazonaws.com/{encoded}"

    def upload(self, data: bytes, folder: str, filename: str, content_type: str) -> StoredObject:
        suffix = PurePosixPath(filename or "").suffix.lower()
        object_key = f"{folder.strip('/')}/{uuid.uuid4().hex}{suffix}"

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Image upload failed", key=object_key, error=str(e))
            raise InternalError("Image upload failed") from e

        logger.info("Image uploaded", key=object_key, size=len(data))
        return StoredObject(url=self.public_url(object_key), asset_id=object_key)

    def delete(self, asset_id: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=asset_id)
        except (ClientError, BotoCoreError) as e:
            raise UpstreamAssetError(f"Failed to delete asset {asset_id}: {e}") from e
        logger.info("Image deleted", key=asset_id)
