"""Local directory storage for uploaded documents.

Blocking filesystem calls run in worker threads so request handlers stay
responsive while large files are written.
"""

import asyncio
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import AsyncIterator

from ...modules.common.exceptions import FileTooLargeError, StorageError, ValidationError
from ..logging import get_logger

logger = get_logger(__name__)


class RemovalOutcome(str, Enum):
    """Result of removing a stored upload."""

    REMOVED = "removed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class StoredFile:
    """A file persisted in the upload directory."""

    upload_id: str
    path: Path
    size: int


def sanitize_upload_id(upload_id: str) -> str:
    """Reduce a caller-supplied upload id to a bare file name.

    Raises:
        ValidationError: If nothing addressable remains after reduction.
    """
    name = os.path.basename((upload_id or "").replace("\\", "/").strip())
    if name in ("", ".", ".."):
        raise ValidationError("Invalid upload id.")
    return name


class UploadStorage:
    """Stores uploads as flat files named by their upload id."""

    def __init__(self, directory: str | os.PathLike[str]):
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        """Create the upload directory if it does not exist."""
        self.directory.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.directory.is_dir()

    def path_for(self, upload_id: str) -> Path:
        return self.directory / sanitize_upload_id(upload_id)

    async def save(self, upload_id: str, chunks: AsyncIterator[bytes], max_size: int) -> StoredFile:
        """Write an async byte stream under upload_id.

        The partial file is removed whenever writing does not complete,
        including when the stream exceeds max_size or the task is cancelled.

        Raises:
            FileTooLargeError: If more than max_size bytes are received.
            StorageError: If the file cannot be written.
        """
        target = self.path_for(upload_id)
        size = 0

        try:
            handle = await asyncio.to_thread(open, target, "xb")
        except OSError as e:
            raise StorageError(f"Cannot create {target}: {e}") from e

        try:
            async for chunk in chunks:
                size += len(chunk)
                if size > max_size:
                    raise FileTooLargeError(f"File exceeds the maximum upload size of {max_size} bytes.")
                await asyncio.to_thread(handle.write, chunk)
        except OSError as e:
            _discard_partial(handle, target)
            raise StorageError(f"Failed writing {target}: {e}") from e
        except BaseException:
            _discard_partial(handle, target)
            raise

        await asyncio.to_thread(handle.close)
        logger.debug(f"Stored upload {upload_id}", extra={"upload_id": upload_id, "size": size})
        return StoredFile(upload_id=target.name, path=target, size=size)

    async def remove(self, upload_id: str) -> RemovalOutcome:
        """Delete a stored upload.

        Returns:
            REMOVED when a file was deleted, NOT_FOUND when there was nothing to delete.

        Raises:
            StorageError: For any other filesystem failure.
        """
        target = self.path_for(upload_id)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            return RemovalOutcome.NOT_FOUND
        except OSError as e:
            raise StorageError(f"Failed removing {target}: {e}") from e
        return RemovalOutcome.REMOVED


def _discard_partial(handle, target: Path) -> None:
    """Close and delete a partially written upload.

    Runs synchronously so it completes even while the writing task is being
    cancelled.
    """
    handle.close()
    target.unlink(missing_ok=True)
