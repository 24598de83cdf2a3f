"""Pydantic schemas for document identity records."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field

from ..common.schemas import CamelModel


class DocumentRecord(BaseModel):
    """One logical document, keyed by its normalized URL."""

    normalized_url: str
    document_key: Annotated[str, Field(min_length=32, max_length=32, pattern=r"^[0-9a-f]{32}$")]
    url: str
    original_name: str = ""
    title: str = ""
    mime_type: str = ""
    size: Optional[int] = None
    upload_id: str = ""
    requested_by: str = ""
    last_modified_at: datetime
    last_accessed_at: datetime


class DocumentPatch(BaseModel):
    """Metadata supplied alongside a reference to a document.

    Empty values never overwrite what the registry already holds.
    """

    original_name: Optional[str] = None
    title: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    upload_id: Optional[str] = None
    requested_by: Optional[str] = None
    last_modified_at: Optional[datetime] = None


class MetadataRequest(CamelModel):
    url: Optional[str] = None
    title: Optional[str] = None
    original_name: Optional[str] = None


class MetadataResponse(CamelModel):
    document_key: str
    url: str
    title: str
    original_name: str
    last_accessed_at: datetime

    @classmethod
    def from_record(cls, record: DocumentRecord) -> "MetadataResponse":
        return cls(
            document_key=record.document_key,
            url=record.url,
            title=record.title,
            original_name=record.original_name,
            last_accessed_at=record.last_accessed_at,
        )
