"""Editor configuration for the collaborative Document Server."""

import posixpath
from typing import Any, Dict, Optional, Protocol
from urllib.parse import urlsplit

from .schemas import EditorPreferences

DEFAULT_FILE_TYPE = "docx"


class EditorHost(Protocol):
    """Whatever embeds the editor (a browser bridge, a test double, ...).

    ``release`` must not return until the previous editor instance has been
    destroyed, so a new instance with a possibly identical key can attach.
    ``attach`` loads the editor script from the Document Server at
    ``document_server_url`` and starts an instance with ``config``.
    """

    async def release(self) -> None: ...

    async def attach(self, config: Dict[str, Any], document_server_url: str) -> None: ...


class DetachedEditorHost:
    """Editor host for headless use; there is no editor instance to manage.

    It only remembers which editor script a browser would have loaded.
    """

    def __init__(self):
        self.script_url: Optional[str] = None

    async def release(self) -> None:
        return None

    async def attach(self, config: Dict[str, Any], document_server_url: str) -> None:
        self.script_url = editor_script_url(document_server_url)


def editor_script_url(document_server_url: str) -> str:
    """URL of the Document Server's editor API script."""
    return f"{document_server_url.rstrip('/')}/web-apps/apps/api/documents/api.js"


def file_type_from_name(name: str) -> str:
    """Lower-cased extension of a file name or URL path, without the dot."""
    path = urlsplit(name).path if "://" in name else name
    extension = posixpath.splitext(path)[1]
    return extension.lstrip(".").lower() or DEFAULT_FILE_TYPE


def title_from_url(url: str) -> str:
    path = urlsplit(url.strip()).path.rstrip("/")
    return posixpath.basename(path) or "Remote document"


def build_editor_config(
    document_key: str,
    url: str,
    title: str,
    file_type: str,
    preferences: EditorPreferences,
) -> Dict[str, Any]:
    """Build the unsigned editor configuration for one document.

    The ``editorConfig.user`` section is a placeholder; the broker replaces it
    with the authenticated user's identity before signing.
    """
    collaborative = preferences.enable_collaboration
    return {
        "documentType": "word",
        "width": "100%",
        "height": "100%",
        "document": {
            "fileType": file_type or DEFAULT_FILE_TYPE,
            "key": document_key,
            "title": title or "Untitled Document",
            "url": url,
            "permissions": {
                "edit": preferences.mode == "edit",
                "download": preferences.allow_download,
                "print": preferences.allow_print,
                "review": collaborative,
                "comment": collaborative,
                "chat": collaborative,
            },
        },
        "editorConfig": {
            "mode": preferences.mode,
            "lang": preferences.lang,
            "collaboration": {
                "mode": "fast" if collaborative else "strict",
                "change": collaborative,
            },
            "customization": {
                "print": preferences.allow_print,
                "download": preferences.allow_download,
                "comments": collaborative,
                "help": True,
                "hideRightMenu": False,
                "toolbarNoTabs": False,
            },
            "user": {"group": "Editors" if collaborative else "Viewer"},
        },
    }
