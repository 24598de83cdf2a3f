"""Editor configuration signing endpoint."""

from typing import Optional

from fastapi import APIRouter, Body, HTTPException, status

from ....infrastructure.logging import get_logger
from ....modules.auth.schemas import EditorTokenRequest, EditorTokenResponse
from ....modules.common.utils.error_handler import handle_exception
from ..dependencies import Authority, CurrentUser

logger = get_logger(__name__)

router = APIRouter(prefix="/onlyoffice", tags=["Editor"])


@router.post(
    "/token",
    summary="Sign Editor Configuration",
    description="""
    Signs an ONLYOFFICE editor configuration for the authenticated user.

    - **config.document**: document descriptor (key, url, title, permissions)
    - **config.editorConfig**: editor settings

    `editorConfig.user` is always replaced with the caller's identity. The
    returned token expires within minutes and is passed to the Document
    Server together with the configuration.
    """,
    responses={
        200: {"description": "Signed editor token"},
        400: {"description": "Configuration, document or editorConfig missing"},
        401: {"description": "No access token presented"},
        403: {"description": "Access token invalid or expired"},
        500: {"description": "Signing failed"},
    },
)
async def sign_editor_config(
    user: CurrentUser,
    authority: Authority,
    payload: Optional[EditorTokenRequest] = Body(None),
) -> EditorTokenResponse:
    """Sign an editor configuration."""
    try:
        return authority.issue_editor_session_token(user, payload.config if payload else None)
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        logger.exception("Failed to sign editor configuration")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to sign editor configuration."
        )
