"""Object storage and upload dependencies."""
from typing import List, Optional, Union

from fastapi import Depends, File, UploadFile

from sitecms.core.config import settings
from sitecms.services.adapters.object_storage import ObjectStorageAdapter
from sitecms.services.image_service import ImageService, ImageUpload, get_storage_adapter


def get_object_storage() -> ObjectStorageAdapter:
    return get_storage_adapter()


def get_image_service(storage: ObjectStorageAdapter = Depends(get_object_storage)) -> ImageService:
    return ImageService(storage)


async def _read(file: UploadFile) -> ImageUpload:
    # One byte past the limit is enough for the size check to reject it.
    return ImageUpload(
        filename=file.filename or "",
        content_type=file.content_type or "",
        data=await file.read(settings.MAX_FILE_SIZE + 1)
    )


async def read_image_upload(
    image: Optional[List[UploadFile]] = File(None)
) -> Union[None, ImageUpload, List[ImageUpload]]:
    """Read the multipart ``image`` field(s) into memory.

    More than one part is passed on as a list so the image service can reject it.
    """
    if not image:
        return None
    uploads = [await _read(part) for part in image]
    return uploads[0] if len(uploads) == 1 else uploads
