"""HTTP client for the broker API."""

from typing import Any, Dict, Optional

import httpx

from ...infrastructure.storage import RemovalOutcome
from ..auth.schemas import EditorTokenResponse, LoginResponse, UserPublic
from ..document.schemas import MetadataResponse
from ..upload.schemas import UploadResponse
from .exceptions import BrokerRequestError, SessionExpiredError


class BrokerClient:
    """Thin wrapper over ``httpx.AsyncClient`` speaking the broker's JSON API.

    Every call is bounded by the client's timeout. Non-success responses
    raise ``BrokerRequestError`` carrying the broker's ``detail`` message;
    401 and 403 raise ``SessionExpiredError``.
    """

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    @classmethod
    def connect(cls, base_url: str, timeout: float) -> "BrokerClient":
        return cls(httpx.AsyncClient(base_url=base_url, timeout=httpx.Timeout(timeout)))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def login(self, username: str, password: str) -> LoginResponse:
        response = await self._request("POST", "/api/auth/login", json={"username": username, "password": password})
        return LoginResponse.model_validate(response.json())

    async def verify(self, token: str) -> UserPublic:
        response = await self._request("GET", "/api/auth/verify", token=token)
        return UserPublic.model_validate(response.json()["user"])

    async def upload(self, token: str, filename: str, content: bytes, content_type: Optional[str] = None) -> UploadResponse:
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        response = await self._request("POST", "/api/uploads", token=token, files=files)
        return UploadResponse.model_validate(response.json())

    async def delete_upload(self, token: str, upload_id: str) -> RemovalOutcome:
        response = await self._request("DELETE", f"/api/uploads/{upload_id}", token=token, allowed=(404,))
        if response.status_code == 404:
            return RemovalOutcome.NOT_FOUND
        return RemovalOutcome.REMOVED

    async def register_metadata(
        self,
        token: str,
        url: str,
        title: Optional[str] = None,
        original_name: Optional[str] = None,
    ) -> MetadataResponse:
        payload = {"url": url, "title": title, "originalName": original_name}
        response = await self._request("POST", "/api/documents/metadata", token=token, json=payload)
        return MetadataResponse.model_validate(response.json())

    async def sign_editor_config(self, token: str, config: Dict[str, Any]) -> EditorTokenResponse:
        response = await self._request("POST", "/api/onlyoffice/token", token=token, json={"config": config})
        return EditorTokenResponse.model_validate(response.json())

    async def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        allowed: tuple = (),
        **kwargs: Any,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = await self.http.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise BrokerRequestError(f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            raise BrokerRequestError(f"{method} {path} failed: {e}") from e

        if response.is_success or response.status_code in allowed:
            return response

        message = _error_message(response)
        if response.status_code in (401, 403):
            raise SessionExpiredError(message, status_code=response.status_code)
        raise BrokerRequestError(message, status_code=response.status_code)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if isinstance(detail, str):
            return detail
        if detail is not None:
            return str(detail)
    return response.reason_phrase
