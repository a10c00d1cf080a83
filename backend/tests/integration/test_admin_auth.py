"""Integration tests for admin authentication and user listing."""
from sitecms.core.security import create_user_token
from sitecms.db.models.admin import Admin
from sitecms.db.models.user import User


class TestAdminSetup:
    """Tests for POST /admin/setup."""

    def test_setup_first_admin(self, client, db_session):
        """The first admin can be created without authentication."""
        response = client.post(
            "/api/v1/admin/setup",
            json={"name": "Owner", "email": "Owner@Test.com", "password": "password123"}
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["token"]
        assert body["data"]["admin"]["email"] == "owner@test.com"
        assert db_session.query(Admin).count() == 1

    def test_setup_refused_once_admin_exists(self, client, admin):
        response = client.post(
            "/api/v1/admin/setup",
            json={"name": "Intruder", "email": "intruder@test.com", "password": "password123"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Admin setup has already been completed"

    def test_setup_validates_body(self, client):
        response = client.post(
            "/api/v1/admin/setup",
            json={"name": "", "email": "not-an-email", "password": "short"}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "fail"
        assert {error["field"] for error in body["errors"]} >= {"email", "password"}


class TestAdminLogin:
    """Tests for POST /admin/login."""

    def test_login_success_updates_last_login(self, client, admin, db_session):
        assert admin.last_login_at is None

        response = client.post(
            "/api/v1/admin/login",
            json={"email": "admin@test.com", "password": "testpassword"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"]
        assert data["admin"]["id"] == admin.admin_id
        assert data["admin"]["lastLoginAt"] is not None
        db_session.refresh(admin)
        assert admin.last_login_at is not None

    def test_login_wrong_password(self, client, admin):
        response = client.post(
            "/api/v1/admin/login",
            json={"email": "admin@test.com", "password": "wrongpassword"}
        )
        assert response.status_code == 401
        assert response.json()["status"] == "fail"

    def test_login_deactivated_admin(self, client, inactive_admin):
        """Deactivated admins are rejected like unknown ones."""
        response = client.post(
            "/api/v1/admin/login",
            json={"email": "former@test.com", "password": "testpassword"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Incorrect email or password"

    def test_logout(self, client):
        response = client.post("/api/v1/admin/logout")
        assert response.status_code == 200
        assert response.json()["status"] == "success"


class TestAdminProfile:
    """Tests for GET /admin/profile and token scoping."""

    def test_profile(self, client, admin_headers):
        response = client.get("/api/v1/admin/profile", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["admin"]["email"] == "admin@test.com"

    def test_requires_token(self, client):
        response = client.get("/api/v1/admin/profile")
        assert response.status_code == 401

    def test_user_token_rejected(self, client, user_headers):
        response = client.get("/api/v1/admin/profile", headers=user_headers)
        assert response.status_code == 401

    def test_token_of_deactivated_admin_rejected(self, client, admin, admin_headers, db_session):
        admin.is_active = False
        db_session.commit()
        response = client.get("/api/v1/admin/profile", headers=admin_headers)
        assert response.status_code == 401


class TestListUsers:
    """Tests for GET /admin/users."""

    def _seed(self, db_session, count=12):
        for i in range(count):
            db_session.add(User(
                name=f"User {i:02d}",
                email=f"user{i:02d}@test.com",
                password_hash="x",
                is_active=i % 3 != 0
            ))
        db_session.commit()

    def test_paginated_with_meta(self, client, admin_headers, db_session):
        self._seed(db_session)
        response = client.get("/api/v1/admin/users?page=2&limit=5", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]["users"]) == 5
        assert body["meta"] == {
            "total": 12,
            "page": 2,
            "limit": 5,
            "totalPages": 3,
            "hasNextPage": True,
            "hasPrevPage": True,
        }
        assert "passwordHash" not in body["data"]["users"][0]

    def test_filter_sort_and_fields(self, client, admin_headers, db_session):
        self._seed(db_session)
        response = client.get(
            "/api/v1/admin/users?isActive=false&sort=-name&fields=name,email",
            headers=admin_headers
        )

        assert response.status_code == 200
        users = response.json()["data"]["users"]
        assert [u["name"] for u in users] == ["User 09", "User 06", "User 03", "User 00"]
        assert set(users[0]) == {"id", "name", "email"}
        assert response.json()["meta"]["total"] == 4

    def test_unknown_filter_field(self, client, admin_headers):
        response = client.get("/api/v1/admin/users?favouriteColour=blue", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["status"] == "fail"

    def test_limit_out_of_range(self, client, admin_headers):
        assert client.get("/api/v1/admin/users?limit=0", headers=admin_headers).status_code == 400
        assert client.get("/api/v1/admin/users?limit=101", headers=admin_headers).status_code == 400

    def test_requires_admin(self, client, user):
        headers = {"Authorization": f"Bearer {create_user_token(user.user_id)}"}
        assert client.get("/api/v1/admin/users", headers=headers).status_code == 401
