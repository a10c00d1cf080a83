"""Integration tests for site settings endpoints."""
from sitecms.core.config import settings as app_settings
from sitecms.db.models.site_settings import SiteSettings

SETTINGS_URL = "/api/v1/admin/settings"


def active_count(db_session) -> int:
    return db_session.query(SiteSettings).filter(SiteSettings.is_active.is_(True)).count()


class TestCurrentSettings:
    """Tests for GET/PUT /admin/settings."""

    def test_get_bootstraps_defaults(self, client, admin_headers, admin):
        response = client.get(SETTINGS_URL, headers=admin_headers)

        assert response.status_code == 200
        settings = response.json()["data"]["settings"]
        assert settings["isActive"] is True
        assert settings["backgroundImage"] == {"url": "default-bg.jpg", "assetId": None}
        assert settings["heroSectionText"]["buttonText"] == "Get Started"
        assert settings["menuChildItems"] == []
        assert settings["updatedBy"] == {"id": admin.admin_id, "name": "Site Admin", "email": "admin@test.com"}

    def test_requires_admin(self, client):
        response = client.get(SETTINGS_URL)
        assert response.status_code == 401
        assert response.json()["status"] == "fail"

    def test_partial_update_merges_sections(self, client, admin_headers):
        client.get(SETTINGS_URL, headers=admin_headers)
        response = client.put(
            SETTINGS_URL,
            headers=admin_headers,
            json={
                "heroSectionText": {"title": "Grand Opening"},
                "socialMedia": {"instagram": "https://instagram.com/site"},
            }
        )

        assert response.status_code == 200
        settings = response.json()["data"]["settings"]
        assert settings["heroSectionText"]["title"] == "Grand Opening"
        assert settings["heroSectionText"]["buttonText"] == "Get Started"
        assert settings["socialMedia"] == {"instagram": "https://instagram.com/site"}

    def test_update_rejects_unknown_keys(self, client, admin_headers):
        response = client.put(SETTINGS_URL, headers=admin_headers, json={"isActive": False})
        assert response.status_code == 400

    def test_update_validates_lengths(self, client, admin_headers):
        response = client.put(
            SETTINGS_URL,
            headers=admin_headers,
            json={"heroSectionText": {"title": "x" * 101}}
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "heroSectionText.title"

    def test_update_menu_items_wholesale(self, client, admin_headers):
        response = client.put(
            SETTINGS_URL,
            headers=admin_headers,
            json={"menuChildItems": [
                {"title": "Soup", "content": "Tomato", "price": 5},
                {"title": "Pie", "content": "Apple", "price": 4.5},
            ]}
        )
        assert response.status_code == 200
        items = response.json()["data"]["settings"]["menuChildItems"]
        assert [item["title"] for item in items] == ["Soup", "Pie"]
        assert all(item["id"] for item in items)

    def test_round_trip_keeps_uploaded_image(self, client, admin_headers, storage, png_file):
        uploaded = client.put(f"{SETTINGS_URL}/background-image", headers=admin_headers, files=png_file)
        current = uploaded.json()["data"]["settings"]

        response = client.put(
            SETTINGS_URL,
            headers=admin_headers,
            json={"backgroundImage": {"url": current["backgroundImage"]["url"]}}
        )

        assert response.status_code == 200
        assert response.json()["data"]["settings"]["backgroundImage"] == current["backgroundImage"]
        assert current["backgroundImage"]["assetId"] in storage.objects
        assert storage.deleted == []

    def test_section_shorthand_routes(self, client, admin_headers):
        hero = client.put(f"{SETTINGS_URL}/hero-section", headers=admin_headers, json={"subtitle": "New"})
        about = client.put(f"{SETTINGS_URL}/about-section", headers=admin_headers, json={"mission": "Feed"})
        menu = client.put(f"{SETTINGS_URL}/menu-main-text", headers=admin_headers, json={"title": "Menu"})

        assert hero.status_code == about.status_code == menu.status_code == 200
        settings = menu.json()["data"]["settings"]
        assert settings["heroSectionText"]["subtitle"] == "New"
        assert settings["heroSectionText"]["title"] == "Welcome to Our Website"
        assert settings["aboutSectionText"]["mission"] == "Feed"
        assert settings["menuMainText"] == {"title": "Menu"}


class TestHistoryAndRestore:
    """Tests for history and restore routes."""

    def test_history_paginated(self, client, admin_headers):
        current = client.get(SETTINGS_URL, headers=admin_headers).json()["data"]["settings"]
        client.post(f"{SETTINGS_URL}/restore/{current['id']}", headers=admin_headers)

        response = client.get(f"{SETTINGS_URL}/history?page=1&limit=10", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]["settings"]) == 2
        assert body["data"]["settings"][0]["isActive"] is True
        assert body["meta"]["total"] == 2
        assert body["meta"]["totalPages"] == 1

    def test_history_limit_bounds(self, client, admin_headers):
        response = client.get(f"{SETTINGS_URL}/history?limit=0", headers=admin_headers)
        assert response.status_code == 400

    def test_restore_excludes_menu_content(self, client, admin_headers, db_session, png_file):
        original = client.put(
            SETTINGS_URL,
            headers=admin_headers,
            json={"heroSectionText": {"title": "Keep Me"}}
        ).json()["data"]["settings"]
        client.post(
            f"{SETTINGS_URL}/menu-items",
            headers=admin_headers,
            data={"title": "Soup", "content": "Tomato", "price": "5"},
            files=png_file
        )

        response = client.post(f"{SETTINGS_URL}/restore/{original['id']}", headers=admin_headers)

        assert response.status_code == 200
        restored = response.json()["data"]["settings"]
        assert restored["id"] != original["id"]
        assert restored["heroSectionText"]["title"] == "Keep Me"
        assert restored["menuChildItems"] == []
        assert active_count(db_session) == 1

    def test_restore_unknown_version(self, client, admin_headers):
        response = client.post(f"{SETTINGS_URL}/restore/424242", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Settings version not found"


class TestImageRoutes:
    """Tests for image upload and removal routes."""

    def test_replace_and_remove_background(self, client, admin_headers, storage, png_file):
        first = client.put(f"{SETTINGS_URL}/background-image", headers=admin_headers, files=png_file)
        assert first.status_code == 200
        first_asset = first.json()["data"]["settings"]["backgroundImage"]["assetId"]
        assert first_asset in storage.objects

        second = client.put(f"{SETTINGS_URL}/background-image", headers=admin_headers, files=png_file)
        assert second.status_code == 200
        assert storage.deleted == [first_asset]

        removed = client.delete(f"{SETTINGS_URL}/background-image", headers=admin_headers)
        assert removed.status_code == 200
        assert removed.json()["data"]["settings"]["backgroundImage"] == {"url": "default-bg.jpg", "assetId": None}

    def test_missing_file(self, client, admin_headers):
        response = client.put(f"{SETTINGS_URL}/about-section-image", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No file uploaded"

    def test_rejects_wrong_type(self, client, admin_headers):
        response = client.put(
            f"{SETTINGS_URL}/menu-main-image",
            headers=admin_headers,
            files={"image": ("notes.txt", b"plain text", "text/plain")}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only JPEG, PNG, and WebP images are allowed"

    def test_rejects_oversized_upload(self, client, admin_headers, storage, monkeypatch):
        monkeypatch.setattr(app_settings, "MAX_FILE_SIZE", 32)
        response = client.put(
            f"{SETTINGS_URL}/background-image",
            headers=admin_headers,
            files={"image": ("big.png", b"\x89PNG" + b"\x00" * 4096, "image/png")}
        )
        assert response.status_code == 400
        assert response.json()["message"].startswith("File size too large")
        assert storage.objects == {}

    def test_rejects_multiple_files(self, client, admin_headers, png_file):
        part = png_file["image"]
        response = client.put(
            f"{SETTINGS_URL}/about-section-image",
            headers=admin_headers,
            files=[("image", part), ("image", part)]
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Multiple files not allowed"


class TestMenuItemRoutes:
    """Tests for menu item routes."""

    def _add(self, client, headers, title, files=None):
        return client.post(
            f"{SETTINGS_URL}/menu-items",
            headers=headers,
            data={"title": title, "content": f"{title} of the day", "price": "7.5"},
            files=files
        )

    def test_add_requires_fields(self, client, admin_headers):
        response = client.post(f"{SETTINGS_URL}/menu-items", headers=admin_headers, data={"title": "Soup"})
        assert response.status_code == 400
        assert response.json()["message"] == "Title, content, and price are required"

    def test_add_with_image(self, client, admin_headers, png_file):
        response = self._add(client, admin_headers, "Soup", files=png_file)
        assert response.status_code == 200
        item = response.json()["data"]["settings"]["menuChildItems"][0]
        assert item["price"] == 7.5
        assert item["image"]["assetId"].startswith("site/menu-items/")

    def test_update_out_of_range(self, client, admin_headers):
        self._add(client, admin_headers, "Soup")
        self._add(client, admin_headers, "Pie")
        response = client.put(f"{SETTINGS_URL}/menu-items/5", headers=admin_headers, data={"title": "Ghost"})
        assert response.status_code == 404

    def test_invalid_index(self, client, admin_headers):
        response = client.delete(f"{SETTINGS_URL}/menu-items/first", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid item index"

    def test_negative_index_not_found(self, client, admin_headers):
        self._add(client, admin_headers, "Soup")
        response = client.delete(f"{SETTINGS_URL}/menu-items/-1", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Menu item not found"

    def test_update_and_delete(self, client, admin_headers, storage, png_file):
        self._add(client, admin_headers, "Soup", files=png_file)
        self._add(client, admin_headers, "Pie")

        updated = client.put(f"{SETTINGS_URL}/menu-items/1", headers=admin_headers, data={"price": "3"})
        assert updated.json()["data"]["settings"]["menuChildItems"][1]["price"] == 3

        deleted = client.delete(f"{SETTINGS_URL}/menu-items/0", headers=admin_headers)
        items = deleted.json()["data"]["settings"]["menuChildItems"]
        assert [item["title"] for item in items] == ["Pie"]
        assert len(storage.deleted) == 1

    def test_item_image_replace_and_remove(self, client, admin_headers, png_file):
        self._add(client, admin_headers, "Soup")

        replaced = client.put(f"{SETTINGS_URL}/menu-items/0/image", headers=admin_headers, files=png_file)
        assert replaced.status_code == 200
        assert replaced.json()["data"]["settings"]["menuChildItems"][0]["image"]["url"]

        removed = client.delete(f"{SETTINGS_URL}/menu-items/0/image", headers=admin_headers)
        assert removed.json()["data"]["settings"]["menuChildItems"][0]["image"] == {"url": None, "assetId": None}
