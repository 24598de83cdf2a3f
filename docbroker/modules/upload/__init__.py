"""Upload lifecycle management."""

from .schemas import UploadResponse
from .services import UploadService

__all__ = ["UploadResponse", "UploadService"]
