"""Pydantic schemas for uploads."""

from ..common.schemas import CamelModel


class UploadResponse(CamelModel):
    upload_id: str
    document_key: str
    original_name: str
    url: str
    size: int
    mime_type: str
