"""FastAPI dependencies for use in API endpoints.

Services live on ``app.state`` and are created once per application by
the app factory, so every handler of one application shares the same
document registry while separate applications stay isolated.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...infrastructure.config.settings import Settings
from ...infrastructure.storage import UploadStorage
from ...modules.auth.schemas import UserPublic
from ...modules.auth.services import CredentialAuthority
from ...modules.document.services import DocumentRegistry, MetadataService
from ...modules.upload.services import UploadService

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Dependency for providing the settings the application was built with."""
    return request.app.state.settings


def get_credential_authority(request: Request) -> CredentialAuthority:
    """Dependency for providing the application's CredentialAuthority."""
    return request.app.state.credential_authority


def get_document_registry(request: Request) -> DocumentRegistry:
    """Dependency for providing the application's DocumentRegistry."""
    return request.app.state.registry


def get_upload_storage(request: Request) -> UploadStorage:
    """Dependency for providing the application's UploadStorage."""
    return request.app.state.upload_storage


def get_metadata_service(registry: DocumentRegistry = Depends(get_document_registry)) -> MetadataService:
    """Dependency for providing a MetadataService instance."""
    return MetadataService(registry)


def get_upload_service(
    settings: Settings = Depends(get_app_settings),
    storage: UploadStorage = Depends(get_upload_storage),
    registry: DocumentRegistry = Depends(get_document_registry),
) -> UploadService:
    """Dependency for providing an UploadService instance."""
    return UploadService.from_settings(settings, storage, registry)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authority: CredentialAuthority = Depends(get_credential_authority),
) -> UserPublic:
    """Resolve the bearer token on the request to its user.

    Raises AuthenticationError (401) without a token and
    PermissionDeniedError (403) for an invalid or expired one.
    """
    token = credentials.credentials if credentials else None
    return authority.verify_access_token(token)


CurrentUser = Annotated[UserPublic, Depends(get_current_user)]
Authority = Annotated[CredentialAuthority, Depends(get_credential_authority)]
