"""Pydantic schemas for authentication and editor token requests."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import CamelModel


class UserPublic(BaseModel):
    """Identity claims carried in access tokens and returned to clients."""

    id: int | str
    username: str
    name: str = ""
    email: str = ""


class UserAccount(UserPublic):
    """A directory entry, including the password it is checked against."""

    password: str = Field(repr=False)

    def public(self) -> UserPublic:
        return UserPublic(id=self.id, username=self.username, name=self.name, email=self.email)


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(CamelModel):
    token: str
    user: UserPublic
    expires_in: str


class VerifyResponse(BaseModel):
    valid: bool
    user: UserPublic


class EditorTokenRequest(BaseModel):
    """Editor configuration to sign.

    The payload is validated by the credential authority rather than by
    pydantic so that a missing section yields a 400 with a readable message.
    """

    model_config = ConfigDict(extra="allow")

    config: Optional[Any] = None


class EditorTokenResponse(CamelModel):
    token: str
    issued_at: str
    expires_in: str
