"""Document identity registry."""

from .schemas import DocumentPatch, DocumentRecord, MetadataRequest, MetadataResponse
from .services import DocumentRegistry, MetadataService

__all__ = [
    "DocumentPatch",
    "DocumentRecord",
    "DocumentRegistry",
    "MetadataRequest",
    "MetadataResponse",
    "MetadataService",
]
