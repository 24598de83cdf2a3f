"""Authentication endpoints."""

from typing import Optional

from fastapi import APIRouter, Body, HTTPException, status

from ....infrastructure.logging import get_logger
from ....modules.auth.schemas import LoginRequest, LoginResponse, VerifyResponse
from ....modules.common.utils.error_handler import handle_exception
from ..dependencies import Authority, CurrentUser

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    summary="Log In",
    description="""
    Exchanges a username and password for an access token.

    The token is sent as `Authorization: Bearer <token>` on every other
    API call and expires after the configured lifetime (24h by default).
    """,
    responses={
        200: {"description": "Access token and user identity"},
        400: {"description": "Username or password missing"},
        401: {"description": "Invalid username or password"},
    },
)
async def login(authority: Authority, credentials: Optional[LoginRequest] = Body(None)) -> LoginResponse:
    """Log in with a username and password."""
    try:
        credentials = credentials or LoginRequest()
        return authority.login(credentials.username, credentials.password)
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        logger.exception("Login failed unexpectedly")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get(
    "/verify",
    summary="Verify Access Token",
    description="Returns the identity carried by the presented access token.",
    responses={
        200: {"description": "Token is valid"},
        401: {"description": "No token presented"},
        403: {"description": "Token invalid or expired"},
    },
)
async def verify(user: CurrentUser) -> VerifyResponse:
    """Verify the bearer token."""
    return VerifyResponse(valid=True, user=user)
