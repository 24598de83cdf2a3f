"""Tests for the upload endpoints."""

import pytest
from httpx import AsyncClient

from ..conftest import DOCX_MIME


async def _upload(client: AsyncClient, headers: dict, filename: str = "report.docx", content: bytes = b"PK docx"):
    return await client.post("/api/uploads", files={"file": (filename, content, DOCX_MIME)}, headers=headers)


@pytest.mark.asyncio
class TestUploadsAPI:
    """Tests for /api/uploads."""

    async def test_upload(self, client: AsyncClient, auth_headers: dict, upload_dir):
        response = await _upload(client, auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert len(data["documentKey"]) == 32
        assert data["uploadId"].endswith(".docx")
        assert data["url"].endswith(data["uploadId"])
        assert data["url"].startswith("http://broker.test:5174/uploads/")
        assert data["originalName"] == "report.docx"
        assert data["size"] == len(b"PK docx")
        assert data["mimeType"] == DOCX_MIME
        assert (upload_dir / data["uploadId"]).exists()

    async def test_uploaded_file_is_served(self, client: AsyncClient, auth_headers: dict):
        data = (await _upload(client, auth_headers, content=b"served bytes")).json()

        response = await client.get(f"/uploads/{data['uploadId']}")

        assert response.status_code == 200
        assert response.content == b"served bytes"

    async def test_upload_key_matches_metadata_key(self, client: AsyncClient, auth_headers: dict):
        """Test that the uploaded URL is registered under the same key."""
        data = (await _upload(client, auth_headers)).json()

        response = await client.post("/api/documents/metadata", json={"url": data["url"]}, headers=auth_headers)

        assert response.json()["documentKey"] == data["documentKey"]
        assert response.json()["originalName"] == "report.docx"

    async def test_upload_rejects_pdf(self, client: AsyncClient, auth_headers: dict, upload_dir):
        response = await _upload(client, auth_headers, filename="report.pdf")

        assert response.status_code == 400
        assert "not allowed" in response.json()["detail"]
        assert list(upload_dir.iterdir()) == []

    async def test_upload_too_large(self, client: AsyncClient, auth_headers: dict, test_settings, upload_dir):
        response = await _upload(client, auth_headers, content=b"x" * (test_settings.MAX_UPLOAD_SIZE + 1))

        assert response.status_code == 400
        assert list(upload_dir.iterdir()) == []

    async def test_upload_without_file(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/uploads", headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"detail": "File is required."}

    async def test_upload_requires_token(self, client: AsyncClient, upload_dir):
        response = await _upload(client, {})

        assert response.status_code == 401
        assert list(upload_dir.iterdir()) == []

    async def test_delete_then_not_found(self, client: AsyncClient, auth_headers: dict, upload_dir):
        upload_id = (await _upload(client, auth_headers)).json()["uploadId"]

        first = await client.delete(f"/api/uploads/{upload_id}", headers=auth_headers)
        second = await client.delete(f"/api/uploads/{upload_id}", headers=auth_headers)

        assert first.status_code == 204
        assert second.status_code == 404
        assert second.json() == {"detail": "Upload not found."}
        assert not (upload_dir / upload_id).exists()

    async def test_delete_requires_token(self, client: AsyncClient, auth_headers: dict):
        upload_id = (await _upload(client, auth_headers)).json()["uploadId"]

        response = await client.delete(f"/api/uploads/{upload_id}")

        assert response.status_code == 401

    async def test_delete_with_encoded_traversal(self, client: AsyncClient, auth_headers: dict, tmp_path):
        outside = tmp_path / "keep.docx"
        outside.write_bytes(b"keep")

        response = await client.delete("/api/uploads/..%2Fkeep.docx", headers=auth_headers)

        assert response.status_code == 404
        assert outside.exists()
