"""Tests for the health endpoint and application wiring."""

import pytest
from httpx import AsyncClient

from docbroker.infrastructure.config.settings import Settings
from docbroker.interfaces.main import create_app
from docbroker.modules.common.exceptions import ConfigurationError


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["uploadDirExists"] is True
    assert data["publicBaseUrl"] == "http://broker.test:5174"
    assert data["timestamp"]


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Correlation-ID": "req-123"})

    assert response.headers["X-Correlation-ID"] == "req-123"


@pytest.mark.asyncio
async def test_correlation_id_is_generated(client: AsyncClient):
    response = await client.get("/health")

    assert response.headers["X-Correlation-ID"]


def test_missing_jwt_secret_is_fatal(upload_dir):
    settings = Settings(JWT_SECRET="", DOC_KEY_SECRET="doc-secret", UPLOAD_DIR=str(upload_dir))

    with pytest.raises(ConfigurationError):
        create_app(settings)


def test_missing_document_key_secret_is_fatal(upload_dir):
    settings = Settings(JWT_SECRET="jwt-secret", DOC_KEY_SECRET="", UPLOAD_DIR=str(upload_dir))

    with pytest.raises(ConfigurationError):
        create_app(settings)
