"""Filesystem storage for uploaded documents."""

from .local import RemovalOutcome, StoredFile, UploadStorage, sanitize_upload_id

__all__ = ["RemovalOutcome", "StoredFile", "UploadStorage", "sanitize_upload_id"]
