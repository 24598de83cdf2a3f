"""Client-side editor session orchestration."""

from .client import BrokerClient
from .editor import DetachedEditorHost, EditorHost, build_editor_config, editor_script_url
from .exceptions import (
    BrokerRequestError,
    NotAuthenticatedError,
    SessionError,
    SessionExpiredError,
    TransitionInProgressError,
)
from .schemas import EditorPreferences, EditorSession, SaveEvent, SessionState
from .services import SessionOrchestrator

__all__ = [
    "BrokerClient",
    "BrokerRequestError",
    "DetachedEditorHost",
    "EditorHost",
    "EditorPreferences",
    "EditorSession",
    "NotAuthenticatedError",
    "SaveEvent",
    "SessionError",
    "SessionExpiredError",
    "SessionOrchestrator",
    "SessionState",
    "TransitionInProgressError",
    "build_editor_config",
    "editor_script_url",
]
