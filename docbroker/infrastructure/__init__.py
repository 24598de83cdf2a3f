"""Infrastructure module for the application."""

from .config import get_settings
from .storage import UploadStorage

__all__ = [
    "UploadStorage",
    "get_settings",
]
