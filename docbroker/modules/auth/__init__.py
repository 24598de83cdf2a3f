"""Authentication and editor token signing."""

from .schemas import EditorTokenResponse, LoginResponse, UserPublic
from .services import CredentialAuthority, format_duration
from .users import UserDirectory

__all__ = [
    "CredentialAuthority",
    "EditorTokenResponse",
    "LoginResponse",
    "UserDirectory",
    "UserPublic",
    "format_duration",
]
