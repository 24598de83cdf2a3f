"""State and configuration models for client editor sessions."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from ..auth.schemas import UserPublic


class SessionState(str, Enum):
    EMPTY = "empty"
    TRANSITIONING = "transitioning"
    ACTIVE = "active"


class EditorPreferences(BaseModel):
    """User-chosen editor options that shape the signed configuration."""

    mode: Literal["edit", "view"] = "edit"
    allow_print: bool = True
    allow_download: bool = True
    enable_collaboration: bool = True
    lang: str = "en"


class Credentials(BaseModel):
    token: str
    user: UserPublic
    expires_in: str = ""


class EditorSession(BaseModel):
    """A fully initialized document session, ready to hand to the editor."""

    document_key: str
    url: str
    title: str
    file_type: str
    upload_id: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    token: str
    issued_at: str = ""
    expires_in: str = ""

    @property
    def is_local_upload(self) -> bool:
        return self.upload_id is not None

    def signed_config(self) -> Dict[str, Any]:
        """The configuration with its token attached, as the editor expects it."""
        return {**self.config, "token": self.token}


class SaveEvent(BaseModel):
    """A save request raised by the editor for the active document."""

    timestamp: datetime
    data: Any = None
