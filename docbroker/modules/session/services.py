"""Client-side coordination of editor sessions.

A session moves ``EMPTY -> TRANSITIONING -> ACTIVE`` and back. Loading a new
document always tears the previous one down first: its upload is deleted,
the editor host releases the old editor instance, and only then is the new
document identified, configured and signed. A failure anywhere in between,
including cancellation or an editor host that stops responding, leaves the
session ``EMPTY``, never half-initialized.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

import anyio

from ...infrastructure.config.settings import Settings
from ...infrastructure.logging import get_logger
from ...infrastructure.storage import RemovalOutcome
from ..auth.schemas import UserPublic
from .client import BrokerClient
from .editor import DetachedEditorHost, EditorHost, build_editor_config, file_type_from_name, title_from_url
from .exceptions import (
    BrokerRequestError,
    NotAuthenticatedError,
    SessionError,
    SessionExpiredError,
    TransitionInProgressError,
)
from .schemas import Credentials, EditorPreferences, EditorSession, SaveEvent, SessionState

logger = get_logger(__name__, component="session_orchestrator")


class SessionOrchestrator:
    """Drives one client's editor session against the broker API."""

    def __init__(
        self,
        client: BrokerClient,
        editor_host: Optional[EditorHost] = None,
        preferences: Optional[EditorPreferences] = None,
        document_server_url: str = "http://localhost:8080",
        teardown_grace: float = 0.0,
        host_timeout: float = 30.0,
    ):
        self.client = client
        self.editor_host = editor_host or DetachedEditorHost()
        self.preferences = preferences or EditorPreferences()
        self.document_server_url = document_server_url
        self.teardown_grace = teardown_grace
        self.host_timeout = host_timeout

        self.state = SessionState.EMPTY
        self.credentials: Optional[Credentials] = None
        self.session: Optional[EditorSession] = None
        self.error: Optional[str] = None
        self.is_dirty = False
        self.last_save_event: Optional[SaveEvent] = None

    @classmethod
    def from_settings(cls, settings: Settings, editor_host: Optional[EditorHost] = None) -> "SessionOrchestrator":
        client = BrokerClient.connect(settings.BROKER_URL, settings.CLIENT_TIMEOUT_SECONDS)
        return cls(
            client,
            editor_host=editor_host,
            document_server_url=settings.DOCUMENT_SERVER_URL,
            teardown_grace=settings.EDITOR_TEARDOWN_GRACE_SECONDS,
            host_timeout=settings.CLIENT_TIMEOUT_SECONDS,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.credentials is not None

    @property
    def user(self) -> Optional[UserPublic]:
        return self.credentials.user if self.credentials else None

    async def login(self, username: str, password: str) -> UserPublic:
        """Log in and keep the access token for subsequent calls."""
        try:
            result = await self.client.login(username, password)
        except SessionExpiredError as e:
            raise BrokerRequestError(e.message, status_code=e.status_code) from e
        self.credentials = Credentials(token=result.token, user=result.user, expires_in=result.expires_in)
        self.error = None
        return result.user

    async def verify(self) -> bool:
        """Check the stored token with the broker, logging out if it was rejected."""
        if self.credentials is None:
            return False
        try:
            self.credentials.user = await self.client.verify(self.credentials.token)
        except SessionExpiredError:
            await self.logout()
            return False
        return True

    async def logout(self) -> None:
        """Discard credentials and any active session.

        Credentials are dropped even when tearing the editor down fails.
        """
        try:
            if self.state == SessionState.ACTIVE:
                await self._teardown(delete_upload=True)
        except SessionExpiredError:
            logger.debug("Access token already rejected while logging out")
        finally:
            self.credentials = None
            self.session = None
            self.state = SessionState.EMPTY

    async def load_local_file(self, content: bytes, filename: str, content_type: Optional[str] = None) -> EditorSession:
        """Replace the current document with a freshly uploaded file."""

        async def identify(token: str) -> EditorSession:
            uploaded = await self.client.upload(token, filename, content, content_type)
            return self._configure(
                document_key=uploaded.document_key,
                url=uploaded.url,
                title=uploaded.original_name or filename,
                file_type=file_type_from_name(uploaded.original_name or filename),
                upload_id=uploaded.upload_id,
            )

        return await self._transition(identify)

    async def load_remote_url(self, url: str, title: Optional[str] = None) -> EditorSession:
        """Replace the current document with one served from a remote URL."""
        url = (url or "").strip()
        if not url:
            raise SessionError("A document URL is required.")

        async def identify(token: str) -> EditorSession:
            metadata = await self.client.register_metadata(token, url, title=title or title_from_url(url))
            return self._configure(
                document_key=metadata.document_key,
                url=url,
                title=metadata.title or title_from_url(url),
                file_type=file_type_from_name(url),
            )

        return await self._transition(identify)

    async def clear(self) -> None:
        """Tear down the current document without loading another."""
        if self.state == SessionState.TRANSITIONING:
            raise TransitionInProgressError("A document change is already in progress.")
        self.state = SessionState.TRANSITIONING
        try:
            await self._teardown(delete_upload=True)
        except SessionExpiredError as e:
            self.credentials = None
            self._fail(e.message)
            raise
        except SessionError as e:
            self._fail(e.message)
            raise
        finally:
            self.session = None
            self.state = SessionState.EMPTY
        self.error = None

    def on_document_state_change(self, has_changes: Any) -> None:
        """Record the editor's report of unsaved changes in the active document."""
        if self.state != SessionState.ACTIVE:
            logger.debug("Ignoring document state change without an active session")
            return
        self.is_dirty = bool(has_changes)

    def on_save_request(self, data: Any = None) -> Optional[SaveEvent]:
        """Record a save request from the editor; the document counts as synced afterwards."""
        if self.state != SessionState.ACTIVE:
            logger.debug("Ignoring save request without an active session")
            return None
        event = SaveEvent(timestamp=datetime.now(timezone.utc), data=data)
        self.last_save_event = event
        self.is_dirty = False
        return event

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _transition(self, identify) -> EditorSession:
        if self.state == SessionState.TRANSITIONING:
            raise TransitionInProgressError("A document change is already in progress.")
        if self.credentials is None:
            raise NotAuthenticatedError("Log in before loading a document.")
        if not self.document_server_url:
            raise SessionError("Set the Document Server URL to start.")

        self.state = SessionState.TRANSITIONING
        self.error = None
        session: Optional[EditorSession] = None
        try:
            await self._teardown(delete_upload=True)
            token = self.credentials.token

            session = await identify(token)
            signed = await self.client.sign_editor_config(token, session.config)
            session = session.model_copy(
                update={"token": signed.token, "issued_at": signed.issued_at, "expires_in": signed.expires_in}
            )
            await self._call_host("attach", self.editor_host.attach, session.signed_config(), self.document_server_url)
        except SessionExpiredError as e:
            self._fail(e.message)
            self.credentials = None
            logger.warning("Access token rejected during document change; logged out")
            raise
        except SessionError as e:
            self._fail(e.message)
            await self._discard_orphan(session)
            raise
        except Exception as e:
            self._fail(str(e) or "Failed to load document.")
            await self._discard_orphan(session)
            raise SessionError(self.error or "Failed to load document.") from e
        except BaseException:
            self._fail("Document change was interrupted.")
            await self._discard_orphan(session)
            raise

        self.session = session
        self.state = SessionState.ACTIVE
        logger.info("Editor session active", extra={"document_key": session.document_key})
        return session

    async def _teardown(self, delete_upload: bool) -> None:
        previous = self.session
        self.session = None
        self.is_dirty = False
        self.last_save_event = None

        if previous is not None and previous.upload_id and delete_upload and self.credentials is not None:
            await self._delete_upload_quietly(previous.upload_id)

        await self._call_host("release", self.editor_host.release)
        if self.teardown_grace > 0:
            await asyncio.sleep(self.teardown_grace)

    async def _call_host(self, step: str, call, *args) -> None:
        """Run an editor host call, bounded by ``host_timeout``."""
        try:
            with anyio.fail_after(self.host_timeout):
                await call(*args)
        except TimeoutError as e:
            raise SessionError(f"Editor host did not finish {step} within {self.host_timeout:g}s.") from e

    async def _discard_orphan(self, session: Optional[EditorSession]) -> None:
        """Delete an upload made by a transition that did not complete."""
        if session is None or not session.upload_id or self.credentials is None:
            return
        try:
            await self._delete_upload_quietly(session.upload_id)
        except SessionExpiredError:
            self.credentials = None

    async def _delete_upload_quietly(self, upload_id: str) -> None:
        try:
            outcome = await self.client.delete_upload(self.credentials.token, upload_id)
        except SessionExpiredError:
            raise
        except BrokerRequestError as e:
            logger.warning(f"Could not delete previous upload {upload_id}: {e.message}")
            return
        if outcome == RemovalOutcome.NOT_FOUND:
            logger.debug(f"Previous upload {upload_id} was already gone")

    def _configure(
        self,
        document_key: str,
        url: str,
        title: str,
        file_type: str,
        upload_id: Optional[str] = None,
    ) -> EditorSession:
        config = build_editor_config(document_key, url, title, file_type, self.preferences)
        return EditorSession(
            document_key=document_key,
            url=url,
            title=title,
            file_type=file_type,
            upload_id=upload_id,
            config=config,
            token="",
        )

    def _fail(self, message: str) -> None:
        self.session = None
        self.state = SessionState.EMPTY
        self.error = message
