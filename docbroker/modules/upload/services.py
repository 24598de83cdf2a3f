"""Upload lifecycle: admission, storage, public URLs and removal."""

import mimetypes
import os
import uuid
from typing import AsyncIterator, List, Optional, Protocol

from ...infrastructure.config.settings import Settings
from ...infrastructure.logging import get_logger
from ...infrastructure.storage import RemovalOutcome, UploadStorage, sanitize_upload_id
from ..auth.schemas import UserPublic
from ..common.exceptions import StorageError, UnsupportedFileTypeError, ValidationError
from ..document.schemas import DocumentPatch
from ..document.services import DocumentRegistry
from .schemas import UploadResponse

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class IncomingFile(Protocol):
    """The parts of ``fastapi.UploadFile`` the upload service relies on."""

    filename: Optional[str]
    content_type: Optional[str]

    async def read(self, size: int = -1) -> bytes: ...


class UploadService:
    """Accepts word-processing uploads and ties each one to a document record."""

    def __init__(
        self,
        storage: UploadStorage,
        registry: DocumentRegistry,
        allowed_extensions: List[str],
        max_size: int,
        public_base_url: str = "",
        uploads_path: str = "/uploads",
        chunk_size: int = 1024 * 1024,
    ):
        self.storage = storage
        self.registry = registry
        self.allowed_extensions = [ext.lower() for ext in allowed_extensions]
        self.max_size = max_size
        self.public_base_url = public_base_url
        self.uploads_path = "/" + uploads_path.strip("/")
        self.chunk_size = chunk_size

    @classmethod
    def from_settings(cls, settings: Settings, storage: UploadStorage, registry: DocumentRegistry) -> "UploadService":
        return cls(
            storage=storage,
            registry=registry,
            allowed_extensions=settings.ALLOWED_EXTENSIONS_LIST,
            max_size=settings.MAX_UPLOAD_SIZE,
            public_base_url=settings.PUBLIC_BASE_URL,
            uploads_path=settings.UPLOADS_PATH,
            chunk_size=settings.UPLOAD_CHUNK_SIZE,
        )

    def check_admission(self, declared_name: Optional[str]) -> str:
        """Validate the declared file name and return the extension to store under.

        The check is on the declared extension only; content is not sniffed.

        Raises:
            ValidationError: If no file name was declared.
            UnsupportedFileTypeError: If the extension is not allowed.
        """
        if not declared_name:
            raise ValidationError("File is required.")

        extension = os.path.splitext(declared_name)[1].lower()
        if extension not in self.allowed_extensions:
            allowed = ", ".join(ext.lstrip(".").upper() for ext in self.allowed_extensions)
            raise UnsupportedFileTypeError(
                f"File type '{extension or 'none'}' is not allowed. Only {allowed} files are allowed."
            )
        return extension

    def new_upload_id(self, extension: str) -> str:
        return f"{uuid.uuid4()}{extension}"

    def build_access_url(self, upload_id: str, request_base_url: str = "") -> str:
        """Compose the URL the Document Server will fetch the upload from.

        Uses the configured public base URL, falling back to the address the
        request arrived on.
        """
        base = (self.public_base_url or request_base_url or "").rstrip("/")
        return f"{base}{self.uploads_path}/{upload_id}"

    async def accept(
        self,
        upload: IncomingFile,
        user: UserPublic,
        request_base_url: str = "",
    ) -> UploadResponse:
        """Store an uploaded file and register its public URL.

        Raises:
            ValidationError: If the file is missing.
            UnsupportedFileTypeError: If its extension is not allowed.
            FileTooLargeError: If it exceeds the size ceiling.
            StorageError: If it cannot be written.
        """
        extension = self.check_admission(upload.filename)
        declared_name = upload.filename or ""
        upload_id = self.new_upload_id(extension)

        stored = await self.storage.save(upload_id, self._iter_chunks(upload), self.max_size)

        mime_type = upload.content_type or mimetypes.guess_type(declared_name)[0] or DEFAULT_MIME_TYPE
        url = self.build_access_url(stored.upload_id, request_base_url)
        record = self.registry.get_or_create(
            url,
            DocumentPatch(
                original_name=declared_name,
                mime_type=mime_type,
                size=stored.size,
                upload_id=stored.upload_id,
                requested_by=user.username,
                last_modified_at=self.registry.now(),
            ),
        )
        if record is None:
            await self.storage.remove(stored.upload_id)
            raise StorageError(f"Could not register upload URL {url!r}")

        logger.info(
            "Upload accepted",
            extra={"upload_id": stored.upload_id, "size": stored.size, "username": user.username},
        )
        return UploadResponse(
            upload_id=stored.upload_id,
            document_key=record.document_key,
            original_name=declared_name,
            url=url,
            size=stored.size,
            mime_type=mime_type,
        )

    async def remove(self, upload_id: str) -> RemovalOutcome:
        """Delete an upload by id.

        A missing upload is reported as NOT_FOUND rather than raised.

        Raises:
            ValidationError: If the id does not name a file.
            StorageError: For unexpected filesystem failures.
        """
        name = sanitize_upload_id(upload_id)
        outcome = await self.storage.remove(name)
        logger.info(f"Upload removal: {outcome.value}", extra={"upload_id": name})
        return outcome

    async def _iter_chunks(self, upload: IncomingFile) -> AsyncIterator[bytes]:
        while True:
            chunk = await upload.read(self.chunk_size)
            if not chunk:
                break
            yield chunk
