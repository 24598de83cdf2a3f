from typing import Optional

from fastapi import FastAPI

from ..infrastructure.app_factory import create_application
from ..infrastructure.config.settings import Settings, get_settings
from ..interfaces.api import router as api_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the broker application for the given settings."""
    return create_application(
        router=api_router,
        settings=settings or get_settings(),
        title="Document Session Broker API",
        summary="Document keys, editor tokens and upload lifecycle for ONLYOFFICE editing",
        description="""
    # Document Session Broker API

    Backend companion for a browser client that opens word-processing
    documents in an ONLYOFFICE Document Server:

    * 🔑 **Document keys**: one stable key per document URL, so collaborators share a session
    * 🔏 **Editor tokens**: short-lived signed editor configurations
    * 📤 **Uploads**: DOC/DOCX storage with public URLs and idempotent deletion
    * 👤 **Authentication**: bearer access tokens for every API call
    """,
        version="0.1.0",
    )


app = create_app()
