"""Unit tests for image validation and object-store lifecycle."""
import pytest

from sitecms.core.exceptions import UploadRejected
from sitecms.services.image_service import ImageService, ImageUpload


class TestValidateImageFile:
    """Tests for ImageService.validate_image_file."""

    def test_accepts_single_png(self, image_service, png_upload):
        assert image_service.validate_image_file(png_upload) is png_upload

    def test_accepts_single_item_list(self, image_service, png_upload):
        assert image_service.validate_image_file([png_upload]) is png_upload

    @pytest.mark.parametrize("file", [None, []])
    def test_missing_file(self, image_service, file):
        with pytest.raises(UploadRejected, match="No file uploaded"):
            image_service.validate_image_file(file)

    def test_multiple_files(self, image_service, png_upload):
        with pytest.raises(UploadRejected, match="Multiple files not allowed"):
            image_service.validate_image_file([png_upload, png_upload])

    def test_wrong_mime_type(self, image_service):
        gif = ImageUpload(filename="anim.gif", content_type="image/gif", data=b"GIF89a")
        with pytest.raises(UploadRejected, match="Only JPEG, PNG, and WebP"):
            image_service.validate_image_file(gif)

    def test_empty_payload(self, image_service):
        empty = ImageUpload(filename="blank.png", content_type="image/png", data=b"")
        with pytest.raises(UploadRejected, match="Invalid file information"):
            image_service.validate_image_file(empty)

    def test_too_large(self, storage):
        service = ImageService(storage, max_file_size=16)
        big = ImageUpload(filename="big.jpg", content_type="image/jpeg", data=b"x" * 17)
        with pytest.raises(UploadRejected, match="File size too large"):
            service.validate_image_file(big)


class TestUploadAndDelete:
    """Tests for upload_image and delete_image."""

    def test_upload_uses_category_folder(self, image_service, storage, png_upload):
        stored = image_service.upload_image(png_upload, "menu_item")
        assert stored.asset_id.startswith("site/menu-items/")
        assert stored.url.endswith(stored.asset_id)
        assert stored.asset_id in storage.objects

    def test_delete_existing_asset(self, image_service, storage, png_upload):
        stored = image_service.upload_image(png_upload, "background")
        assert image_service.delete_image(stored.asset_id) is True
        assert storage.deleted == [stored.asset_id]

    def test_delete_failure_is_swallowed(self, image_service):
        """Unknown assets make the store raise; the service reports False."""
        assert image_service.delete_image("site/backgrounds/missing.png") is False

    def test_delete_without_asset_id_is_noop(self, image_service, storage):
        assert image_service.delete_image(None) is False
        assert storage.deleted == []
