"""Tests for the upload lifecycle manager."""

import pytest

from docbroker.infrastructure.storage import RemovalOutcome
from docbroker.modules.auth.schemas import UserPublic
from docbroker.modules.common.exceptions import FileTooLargeError, UnsupportedFileTypeError, ValidationError
from docbroker.modules.document.services import DocumentRegistry
from docbroker.modules.upload.services import UploadService

from ...conftest import DOCX_MIME


class FakeUpload:
    """In-memory stand-in for an incoming multipart file."""

    def __init__(self, filename, content: bytes, content_type=None):
        self.filename = filename
        self.content_type = content_type
        self._content = content
        self._offset = 0

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._content) - self._offset
        chunk = self._content[self._offset : self._offset + size]
        self._offset += len(chunk)
        return chunk


@pytest.mark.asyncio
async def test_accept_stores_and_registers(upload_service: UploadService, admin_user: UserPublic, upload_dir):
    """Test that an accepted upload is on disk and has a document record."""
    response = await upload_service.accept(FakeUpload("report.docx", b"PK\x03\x04 docx", DOCX_MIME), admin_user)

    assert response.upload_id.endswith(".docx")
    assert response.url == f"http://broker.test:5174/uploads/{response.upload_id}"
    assert response.size == len(b"PK\x03\x04 docx")
    assert response.mime_type == DOCX_MIME
    assert response.original_name == "report.docx"
    assert (upload_dir / response.upload_id).read_bytes() == b"PK\x03\x04 docx"

    record = upload_service.registry.get(response.url)
    assert record.document_key == response.document_key
    assert record.upload_id == response.upload_id
    assert record.requested_by == "admin"


@pytest.mark.asyncio
async def test_accept_generates_unique_ids(upload_service: UploadService, admin_user: UserPublic):
    first = await upload_service.accept(FakeUpload("a.docx", b"one"), admin_user)
    second = await upload_service.accept(FakeUpload("a.docx", b"two"), admin_user)

    assert first.upload_id != second.upload_id
    assert first.document_key != second.document_key


@pytest.mark.asyncio
async def test_accept_guesses_mime_type(upload_service: UploadService, admin_user: UserPublic):
    response = await upload_service.accept(FakeUpload("legacy.doc", b"doc"), admin_user)

    assert response.mime_type == "application/msword"
    assert response.upload_id.endswith(".doc")


@pytest.mark.asyncio
@pytest.mark.parametrize("filename", ["report.pdf", "notes.txt", "noextension", "archive.docx.zip"])
async def test_accept_rejects_other_types(upload_service: UploadService, admin_user: UserPublic, upload_dir, filename):
    with pytest.raises(UnsupportedFileTypeError):
        await upload_service.accept(FakeUpload(filename, b"data"), admin_user)

    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_rejection_message_lists_allowed_types(upload_service: UploadService, admin_user: UserPublic):
    with pytest.raises(UnsupportedFileTypeError) as exc_info:
        await upload_service.accept(FakeUpload("report.pdf", b"data"), admin_user)

    assert str(exc_info.value) == "File type '.pdf' is not allowed. Only DOC, DOCX files are allowed."


@pytest.mark.asyncio
async def test_extension_check_is_case_insensitive(upload_service: UploadService, admin_user: UserPublic):
    response = await upload_service.accept(FakeUpload("REPORT.DOCX", b"data"), admin_user)

    assert response.upload_id.endswith(".docx")


@pytest.mark.asyncio
@pytest.mark.parametrize("filename", [None, ""])
async def test_accept_requires_a_file_name(upload_service: UploadService, admin_user: UserPublic, filename):
    with pytest.raises(ValidationError):
        await upload_service.accept(FakeUpload(filename, b"data"), admin_user)


@pytest.mark.asyncio
async def test_too_large_leaves_no_partial_file(
    upload_service: UploadService, admin_user: UserPublic, upload_dir, registry: DocumentRegistry
):
    content = b"x" * (upload_service.max_size + 1)

    with pytest.raises(FileTooLargeError):
        await upload_service.accept(FakeUpload("big.docx", content), admin_user)

    assert list(upload_dir.iterdir()) == []
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_exact_size_limit_is_accepted(upload_service: UploadService, admin_user: UserPublic):
    content = b"x" * upload_service.max_size

    response = await upload_service.accept(FakeUpload("full.docx", content), admin_user)

    assert response.size == upload_service.max_size


@pytest.mark.asyncio
async def test_remove_then_not_found(upload_service: UploadService, admin_user: UserPublic, upload_dir):
    response = await upload_service.accept(FakeUpload("report.docx", b"data"), admin_user)

    assert await upload_service.remove(response.upload_id) == RemovalOutcome.REMOVED
    assert not (upload_dir / response.upload_id).exists()
    assert await upload_service.remove(response.upload_id) == RemovalOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_remove_cannot_escape_upload_directory(upload_service: UploadService, tmp_path):
    """Test that path components in an upload id are discarded."""
    outside = tmp_path / "secret.docx"
    outside.write_bytes(b"keep me")

    assert await upload_service.remove("../secret.docx") == RemovalOutcome.NOT_FOUND
    assert await upload_service.remove("..\\secret.docx") == RemovalOutcome.NOT_FOUND
    assert outside.read_bytes() == b"keep me"


@pytest.mark.asyncio
@pytest.mark.parametrize("upload_id", ["", "..", ".", "/"])
async def test_remove_rejects_unaddressable_ids(upload_service: UploadService, upload_id):
    with pytest.raises(ValidationError):
        await upload_service.remove(upload_id)


def test_access_url_prefers_public_base_url(upload_service: UploadService):
    assert upload_service.build_access_url("abc.docx", "http://internal:8000/") == (
        "http://broker.test:5174/uploads/abc.docx"
    )


def test_access_url_falls_back_to_request_base(upload_service: UploadService):
    upload_service.public_base_url = ""

    assert upload_service.build_access_url("abc.docx", "http://internal:8000/") == "http://internal:8000/uploads/abc.docx"
