"""Credential authority: access tokens and signed editor configurations."""

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

import jwt

from ...infrastructure.config.settings import Settings
from ...infrastructure.logging import get_logger
from ..common.exceptions import (
    AuthenticationError,
    ConfigurationError,
    PermissionDeniedError,
    TokenSigningError,
    ValidationError,
)
from .schemas import EditorTokenResponse, LoginResponse, UserPublic
from .users import UserDirectory

logger = get_logger(__name__)

ACCESS_TOKEN_USE = "access"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


def format_duration(seconds: int) -> str:
    """Render a duration the way the browser client displays it ("24h", "5m", "90s")."""
    if seconds and seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    if seconds and seconds % 60 == 0:
        return f"{seconds // 60}m"
    return f"{seconds}s"


class CredentialAuthority:
    """Issues and verifies the broker's two kinds of signed credentials.

    Access tokens authenticate API calls and live for hours. Editor session
    tokens carry a complete editor configuration for the Document Server and
    expire within minutes. Access tokens are marked with a ``token_use``
    claim so an editor token can never be presented as a login credential.
    """

    def __init__(
        self,
        secret: str,
        editor_secret: Optional[str] = None,
        algorithm: str = "HS256",
        access_token_ttl: timedelta = timedelta(hours=24),
        editor_token_ttl: timedelta = timedelta(minutes=5),
        users: Optional[UserDirectory] = None,
    ):
        if not secret:
            raise ConfigurationError("JWT_SECRET must be configured.")
        self._secret = secret
        self._editor_secret = editor_secret or secret
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl
        self.editor_token_ttl = editor_token_ttl
        self.users = users or UserDirectory.from_setting("")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialAuthority":
        return cls(
            secret=settings.JWT_SECRET,
            editor_secret=settings.EDITOR_SIGNING_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            access_token_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            editor_token_ttl=timedelta(minutes=settings.EDITOR_TOKEN_EXPIRE_MINUTES),
            users=UserDirectory.from_setting(settings.AUTH_USERS),
        )

    def authenticate(self, username: Optional[str], password: Optional[str]) -> UserPublic:
        """Check a username/password pair against the user directory.

        Raises:
            ValidationError: If either field is missing.
            AuthenticationError: If the pair does not match an account.
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        account = self.users.check(username, password)
        if account is None:
            logger.info("Rejected login attempt", extra={"username": username})
            raise AuthenticationError("Invalid username or password")
        return account.public()

    def login(self, username: Optional[str], password: Optional[str]) -> LoginResponse:
        user = self.authenticate(username, password)
        token, expires_in = self.issue_access_token(user)
        logger.info("User logged in", extra={"username": user.username})
        return LoginResponse(token=token, user=user, expires_in=expires_in)

    def issue_access_token(self, subject: UserPublic) -> Tuple[str, str]:
        """Sign the subject's identity claims.

        Returns:
            The token and its lifetime as a display string.
        """
        now = datetime.now(timezone.utc)
        claims = {
            **subject.model_dump(),
            "token_use": ACCESS_TOKEN_USE,
            "iat": now,
            "exp": now + self.access_token_ttl,
        }
        token = self._sign(claims, self._secret)
        return token, format_duration(int(self.access_token_ttl.total_seconds()))

    def verify_access_token(self, token: Optional[str]) -> UserPublic:
        """Decode an access token back into its subject.

        Raises:
            AuthenticationError: If no token was presented.
            PermissionDeniedError: If the token is malformed, tampered with,
                expired or not an access token. The message is the same in
                every case.
        """
        if not token:
            raise AuthenticationError("Access token required")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.InvalidTokenError as e:
            logger.debug(f"Access token rejected: {e}")
            raise PermissionDeniedError(INVALID_TOKEN_MESSAGE) from e

        if claims.get("token_use") != ACCESS_TOKEN_USE:
            raise PermissionDeniedError(INVALID_TOKEN_MESSAGE)

        try:
            return UserPublic(
                id=claims["id"],
                username=claims["username"],
                name=claims.get("name") or "",
                email=claims.get("email") or "",
            )
        except (KeyError, ValueError) as e:
            raise PermissionDeniedError(INVALID_TOKEN_MESSAGE) from e

    def issue_editor_session_token(self, subject: UserPublic, config: Any) -> EditorTokenResponse:
        """Sign an editor configuration on behalf of an authenticated user.

        The configuration's ``editorConfig.user`` is replaced with the
        subject's identity; whatever the client sent there is discarded.

        Raises:
            ValidationError: If the configuration or one of its required
                sections is missing.
            TokenSigningError: If signing fails.
        """
        payload = self.authorize_editor_config(subject, config)
        now = datetime.now(timezone.utc)
        claims = {**payload, "iat": now, "exp": now + self.editor_token_ttl}
        token = self._sign(claims, self._editor_secret)
        return EditorTokenResponse(
            token=token,
            issued_at=now.isoformat(),
            expires_in=format_duration(int(self.editor_token_ttl.total_seconds())),
        )

    def authorize_editor_config(self, subject: UserPublic, config: Any) -> Dict[str, Any]:
        """Validate an editor configuration and inject the subject's identity."""
        if not config or not isinstance(config, Mapping):
            raise ValidationError("Editor configuration payload is required.")

        if not config.get("document") or not config.get("editorConfig"):
            raise ValidationError("Editor configuration must include both document and editorConfig sections.")

        if not isinstance(config["editorConfig"], Mapping):
            raise ValidationError("editorConfig must be an object.")

        payload = copy.deepcopy(dict(config))
        payload["editorConfig"] = {
            **payload["editorConfig"],
            "user": {
                "id": str(subject.id),
                "name": subject.name or subject.username or "Authenticated User",
                "email": subject.email or "user@example.com",
            },
        }
        return payload

    def decode_editor_session_token(self, token: str) -> Dict[str, Any]:
        """Decode an editor session token, as the Document Server would."""
        try:
            return jwt.decode(token, self._editor_secret, algorithms=[self.algorithm])
        except jwt.InvalidTokenError as e:
            raise PermissionDeniedError(INVALID_TOKEN_MESSAGE) from e

    def _sign(self, claims: Dict[str, Any], secret: str) -> str:
        try:
            return jwt.encode(claims, secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            logger.exception("Failed to sign token")
            raise TokenSigningError(str(e)) from e
