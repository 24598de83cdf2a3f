"""Tests for editor configuration building."""

import pytest

from docbroker.modules.session.editor import (
    DetachedEditorHost,
    build_editor_config,
    editor_script_url,
    file_type_from_name,
    title_from_url,
)
from docbroker.modules.session.schemas import EditorPreferences, EditorSession


@pytest.mark.parametrize(
    "name, expected",
    [
        ("report.docx", "docx"),
        ("REPORT.DOC", "doc"),
        ("https://x.com/files/plan.DOCX?download=1", "docx"),
        ("https://x.com/files/", "docx"),
        ("noextension", "docx"),
    ],
)
def test_file_type_from_name(name, expected):
    assert file_type_from_name(name) == expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://x.com/files/plan.docx", "plan.docx"),
        ("https://x.com/files/plan.docx/", "plan.docx"),
        (" https://x.com/a.docx?x=1 ", "a.docx"),
        ("https://x.com", "Remote document"),
    ],
)
def test_title_from_url(url, expected):
    assert title_from_url(url) == expected


def test_collaborative_edit_config():
    config = build_editor_config("k" * 32, "https://x.com/a.docx", "a.docx", "docx", EditorPreferences())

    assert config["documentType"] == "word"
    assert config["document"] == {
        "fileType": "docx",
        "key": "k" * 32,
        "title": "a.docx",
        "url": "https://x.com/a.docx",
        "permissions": {
            "edit": True,
            "download": True,
            "print": True,
            "review": True,
            "comment": True,
            "chat": True,
        },
    }
    assert config["editorConfig"]["mode"] == "edit"
    assert config["editorConfig"]["collaboration"] == {"mode": "fast", "change": True}


def test_view_only_config():
    preferences = EditorPreferences(mode="view", allow_print=False, allow_download=False, enable_collaboration=False)

    config = build_editor_config("k" * 32, "https://x.com/a.docx", "", "", preferences)

    assert config["document"]["title"] == "Untitled Document"
    assert config["document"]["fileType"] == "docx"
    assert config["document"]["permissions"]["edit"] is False
    assert config["document"]["permissions"]["download"] is False
    assert config["editorConfig"]["customization"]["print"] is False
    assert config["editorConfig"]["collaboration"]["mode"] == "strict"
    assert config["editorConfig"]["user"] == {"group": "Viewer"}


def test_signed_config_attaches_token():
    session = EditorSession(
        document_key="k" * 32,
        url="https://x.com/a.docx",
        title="a.docx",
        file_type="docx",
        config={"document": {"key": "k" * 32}},
        token="signed",
    )

    assert session.signed_config() == {"document": {"key": "k" * 32}, "token": "signed"}
    assert not session.is_local_upload


@pytest.mark.parametrize("server_url", ["http://localhost:8080", "http://localhost:8080/"])
def test_editor_script_url(server_url):
    assert editor_script_url(server_url) == "http://localhost:8080/web-apps/apps/api/documents/api.js"


@pytest.mark.asyncio
async def test_detached_host_records_script_url():
    host = DetachedEditorHost()

    await host.attach({"document": {}, "editorConfig": {}}, "https://docs.example.com")
    await host.release()

    assert host.script_url == "https://docs.example.com/web-apps/apps/api/documents/api.js"
