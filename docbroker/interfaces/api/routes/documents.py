"""Document metadata endpoints."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from ....infrastructure.logging import get_logger
from ....modules.common.utils.error_handler import handle_exception
from ....modules.document.schemas import MetadataRequest, MetadataResponse
from ....modules.document.services import MetadataService
from ..dependencies import CurrentUser, get_metadata_service

logger = get_logger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post(
    "/metadata",
    summary="Register Document URL",
    description="""
    Returns the document key for a URL, registering it on first use.

    URLs that differ only in case, whitespace or trailing slashes share one
    key, so every collaborator opening the same document joins the same
    editing session.

    - **url**: location the Document Server can fetch the document from
    - **title**: optional display title
    - **originalName**: optional original file name
    """,
    responses={
        200: {"description": "Document key and metadata"},
        400: {"description": "URL missing or blank"},
        401: {"description": "No access token presented"},
        403: {"description": "Access token invalid or expired"},
    },
)
async def register_document(
    user: CurrentUser,
    metadata_service: MetadataService = Depends(get_metadata_service),
    payload: Optional[MetadataRequest] = Body(None),
) -> MetadataResponse:
    """Register a document URL and return its key."""
    try:
        payload = payload or MetadataRequest()
        return metadata_service.register(payload.url, user, title=payload.title, original_name=payload.original_name)
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        logger.exception("Failed to store document metadata")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to store document metadata."
        )
