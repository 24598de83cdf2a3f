"""Upload endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status

from ....infrastructure.logging import get_logger
from ....infrastructure.storage import RemovalOutcome
from ....modules.common.exceptions import ValidationError
from ....modules.common.utils.error_handler import handle_exception
from ....modules.upload.schemas import UploadResponse
from ....modules.upload.services import UploadService
from ..dependencies import CurrentUser, get_upload_service

logger = get_logger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
    description="""
    Stores a word-processing file and registers the URL it is served from.

    Send the file as multipart field `file`. Only the configured extensions
    (DOC and DOCX by default) up to the configured size are accepted. The
    response carries the upload id used to delete the file later and the
    document key for the editor.
    """,
    responses={
        201: {"description": "Upload stored"},
        400: {"description": "File missing, type not allowed or too large"},
        401: {"description": "No access token presented"},
        403: {"description": "Access token invalid or expired"},
        500: {"description": "Upload could not be stored"},
    },
)
async def create_upload(
    request: Request,
    user: CurrentUser,
    file: Optional[UploadFile] = File(None),
    upload_service: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    """Upload a document."""
    try:
        if file is None:
            raise ValidationError("File is required.")
        return await upload_service.accept(file, user, request_base_url=str(request.base_url))
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        logger.exception("Upload failed unexpectedly")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Upload failed.")
    finally:
        if file is not None:
            await file.close()


@router.delete(
    "/{upload_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Upload",
    description="""
    Deletes a stored upload.

    Deleting an upload that no longer exists answers 404, which callers
    cleaning up an old session can safely ignore.
    """,
    responses={
        204: {"description": "Upload deleted"},
        400: {"description": "Upload id does not name a file"},
        404: {"description": "Upload not found"},
        500: {"description": "Upload could not be deleted"},
    },
)
async def delete_upload(
    upload_id: str,
    user: CurrentUser,
    upload_service: UploadService = Depends(get_upload_service),
) -> Response:
    """Delete an upload."""
    try:
        outcome = await upload_service.remove(upload_id)
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        logger.exception("Upload deletion failed unexpectedly")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to delete upload.")

    if outcome == RemovalOutcome.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Upload not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
