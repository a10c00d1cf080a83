"""Pytest configuration and fixtures."""
import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test configuration BEFORE importing the app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["APP_ENV"] = "test"
os.environ["DEBUG"] = "False"
os.environ["STORAGE_PROVIDER"] = "mock"
os.environ["PROVISION_SETTINGS_ON_STARTUP"] = "False"
os.environ["RATE_LIMIT_ENABLED"] = "False"
os.environ["BCRYPT_ROUNDS"] = "4"

from sitecms.main import app
from sitecms.api.deps import get_db, get_object_storage
from sitecms.core.security import get_password_hash, create_admin_token, create_user_token
from sitecms.db.base import Base
from sitecms.db.models.admin import Admin
from sitecms.db.models.user import User
from sitecms.services.adapters.object_storage import MockStorageAdapter
from sitecms.services.image_service import ImageService, ImageUpload

# Use SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage():
    """In-memory object store shared by the app and the test."""
    return MockStorageAdapter()


@pytest.fixture
def image_service(storage):
    return ImageService(storage)


@pytest.fixture(scope="function")
def client(db_session, storage):
    """Create a test client with database and storage overrides."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_object_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db_session):
    """Create an active admin for testing."""
    admin = Admin(
        name="Site Admin",
        email="admin@test.com",
        password_hash=get_password_hash("testpassword"),
        is_active=True
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def inactive_admin(db_session):
    """Create a deactivated admin for testing."""
    admin = Admin(
        name="Former Admin",
        email="former@test.com",
        password_hash=get_password_hash("testpassword"),
        is_active=False
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def user(db_session):
    """Create an end user for testing."""
    user = User(
        name="Jane Visitor",
        email="jane@test.com",
        phone="+1 555 123 4567",
        password_hash=get_password_hash("testpassword"),
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_headers(admin):
    """Authorization headers carrying an admin token."""
    return {"Authorization": f"Bearer {create_admin_token(admin.admin_id)}"}


@pytest.fixture
def user_headers(user):
    """Authorization headers carrying a user token."""
    return {"Authorization": f"Bearer {create_user_token(user.user_id)}"}


@pytest.fixture
def png_upload():
    """An in-memory PNG as the image service receives it."""
    return ImageUpload(filename="photo.png", content_type="image/png", data=PNG_BYTES)


@pytest.fixture
def png_file():
    """A multipart ``image`` part for TestClient requests."""
    return {"image": ("photo.png", PNG_BYTES, "image/png")}
