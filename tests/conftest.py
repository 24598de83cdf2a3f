"""Test configuration and fixtures for the document session broker."""

import os
import tempfile

# Secrets and the upload directory must be in place before the settings
# module is imported.
os.environ.setdefault("JWT_SECRET", "test_secret_key_for_tests")
os.environ.setdefault("DOC_KEY_SECRET", "test_doc_key_secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="docbroker-test-uploads-"))
os.environ.setdefault("LOG_CORRELATION_ID", "true")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from docbroker.infrastructure.config.settings import Settings  # noqa: E402
from docbroker.infrastructure.logging import configure_testing_logging  # noqa: E402
from docbroker.interfaces.main import create_app  # noqa: E402
from docbroker.modules.auth.schemas import UserPublic  # noqa: E402
from docbroker.modules.auth.services import CredentialAuthority  # noqa: E402
from docbroker.modules.document.services import DocumentRegistry  # noqa: E402
from docbroker.infrastructure.storage import UploadStorage  # noqa: E402
from docbroker.modules.upload.services import UploadService  # noqa: E402

TEST_JWT_SECRET = "test_secret_key_for_tests"
TEST_DOC_KEY_SECRET = "test_doc_key_secret"

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep test output free of application logs."""
    configure_testing_logging()
    yield


@pytest.fixture
def upload_dir(tmp_path):
    """Create an isolated upload directory for a test."""
    directory = tmp_path / "uploads"
    directory.mkdir()
    return directory


@pytest.fixture
def test_settings(upload_dir) -> Settings:
    """Settings pointing at a temporary upload directory."""
    return Settings(
        JWT_SECRET=TEST_JWT_SECRET,
        DOC_KEY_SECRET=TEST_DOC_KEY_SECRET,
        UPLOAD_DIR=str(upload_dir),
        PUBLIC_BASE_URL="http://broker.test:5174",
        MAX_UPLOAD_SIZE=64 * 1024,
        UPLOAD_CHUNK_SIZE=4096,
        AUTH_USERS="",
    )


@pytest.fixture
def app(test_settings):
    """Create a fresh application with its own registry and storage."""
    return create_app(test_settings)


@pytest_asyncio.fixture(scope="function")
async def client(app):
    """Create a test client bound to the application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_token(client: AsyncClient) -> str:
    """Log in as the admin demo user."""
    response = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(auth_token: str) -> dict:
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def authority() -> CredentialAuthority:
    return CredentialAuthority(secret=TEST_JWT_SECRET)


@pytest.fixture
def registry() -> DocumentRegistry:
    return DocumentRegistry(secret=TEST_DOC_KEY_SECRET)


@pytest.fixture
def upload_service(test_settings, upload_dir, registry) -> UploadService:
    return UploadService.from_settings(test_settings, UploadStorage(upload_dir), registry)


@pytest.fixture
def admin_user() -> UserPublic:
    return UserPublic(id=1, username="admin", name="Administrator", email="admin@example.com")


@pytest.fixture
def editor_config() -> dict:
    """A minimal editor configuration as the browser client sends it."""
    return {
        "documentType": "word",
        "document": {
            "fileType": "docx",
            "key": "0123456789abcdef0123456789abcdef",
            "title": "report.docx",
            "url": "http://broker.test:5174/uploads/report.docx",
        },
        "editorConfig": {
            "mode": "edit",
            "lang": "en",
            "user": {"id": "spoofed", "name": "Mallory", "email": "mallory@example.com"},
        },
    }
