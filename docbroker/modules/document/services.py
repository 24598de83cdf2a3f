"""Document identity registry.

Maps document locations to deterministic document keys. The collaborative
editing engine merges editors that present the same key, so two clients
opening the same URL must always derive the same key without talking to
each other. The key is therefore a pure function of the normalized URL and
a server-held secret, and survives restarts and eviction.
"""

import hashlib
import re
import threading
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ...infrastructure.config.settings import Settings
from ...infrastructure.logging import get_logger
from ..auth.schemas import UserPublic
from ..common.exceptions import ConfigurationError, ValidationError
from .schemas import DocumentPatch, DocumentRecord, MetadataResponse

logger = get_logger(__name__)

DOCUMENT_KEY_LENGTH = 32

_WHITESPACE = re.compile(r"\s+")
_TRAILING_SLASHES = re.compile(r"/+$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentRegistry:
    """In-memory store of document records, owned by one application instance.

    Records are upserted by normalized URL under a lock. Records idle for
    longer than ``ttl`` are pruned, and the least recently accessed records
    are evicted once ``max_entries`` is exceeded.
    """

    def __init__(
        self,
        secret: str,
        max_entries: int = 10000,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ConfigurationError("DOC_KEY_SECRET must be configured.")
        self._secret = secret
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._records: "OrderedDict[str, DocumentRecord]" = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentRegistry":
        ttl = timedelta(seconds=settings.REGISTRY_TTL_SECONDS) if settings.REGISTRY_TTL_SECONDS > 0 else None
        return cls(secret=settings.DOC_KEY_SECRET, max_entries=settings.REGISTRY_MAX_ENTRIES, ttl=ttl)

    def __len__(self) -> int:
        return len(self._records)

    def now(self) -> datetime:
        return self._clock()

    @staticmethod
    def normalize(url: Optional[str]) -> str:
        """Canonicalize a document location.

        Strips all whitespace, trailing slashes and case. Returns an empty
        string for empty input.
        """
        if not url:
            return ""
        normalized = _WHITESPACE.sub("", url)
        normalized = _TRAILING_SLASHES.sub("", normalized)
        return normalized.lower()

    def derive_key(self, normalized_url: str) -> str:
        """Derive the 32 hex character document key for a normalized URL."""
        digest = hashlib.sha256(f"{self._secret}::{normalized_url}".encode("utf-8")).hexdigest()
        return digest[:DOCUMENT_KEY_LENGTH]

    def get(self, url: Optional[str]) -> Optional[DocumentRecord]:
        """Look up a record without refreshing its access time."""
        normalized_url = self.normalize(url)
        with self._lock:
            return self._records.get(normalized_url)

    def get_or_create(self, url: Optional[str], patch: Optional[DocumentPatch] = None) -> Optional[DocumentRecord]:
        """Create or refresh the record for url.

        This is the only way records enter or change in the registry.

        Args:
            url: Document location as supplied by the caller
            patch: Metadata to merge; empty fields keep prior values

        Returns:
            The stored record, or None if the URL normalizes to nothing
        """
        normalized_url = self.normalize(url)
        if not normalized_url:
            return None

        patch = patch or DocumentPatch()
        now = self._clock()

        with self._lock:
            self._prune(now)
            existing = self._records.get(normalized_url)

            if existing is None:
                original_name = patch.original_name or ""
                record = DocumentRecord(
                    normalized_url=normalized_url,
                    document_key=self.derive_key(normalized_url),
                    url=url.strip(),
                    original_name=original_name,
                    title=patch.title or original_name,
                    mime_type=patch.mime_type or "",
                    size=patch.size,
                    upload_id=patch.upload_id or "",
                    requested_by=patch.requested_by or "",
                    last_modified_at=patch.last_modified_at or now,
                    last_accessed_at=now,
                )
                logger.debug("Registered document", extra={"document_key": record.document_key})
            else:
                original_name = patch.original_name or existing.original_name
                record = existing.model_copy(
                    update={
                        "url": url.strip(),
                        "original_name": original_name,
                        "title": patch.title or existing.title or original_name,
                        "mime_type": patch.mime_type or existing.mime_type,
                        "size": patch.size if patch.size is not None else existing.size,
                        "upload_id": patch.upload_id or existing.upload_id,
                        "requested_by": patch.requested_by or existing.requested_by,
                        "last_modified_at": patch.last_modified_at or existing.last_modified_at,
                        "last_accessed_at": now,
                    }
                )

            self._records[normalized_url] = record
            self._records.move_to_end(normalized_url)
            self._evict_overflow()

        return record

    def _prune(self, now: datetime) -> None:
        if self.ttl is None:
            return
        cutoff = now - self.ttl
        while self._records:
            oldest_url, oldest = next(iter(self._records.items()))
            if oldest.last_accessed_at >= cutoff:
                break
            del self._records[oldest_url]

    def _evict_overflow(self) -> None:
        while self.max_entries > 0 and len(self._records) > self.max_entries:
            evicted_url, _ = self._records.popitem(last=False)
            logger.debug("Evicted idle document record", extra={"normalized_url": evicted_url})


class MetadataService:
    """API-facing registration of remote document URLs."""

    def __init__(self, registry: DocumentRegistry):
        self.registry = registry

    def register(
        self,
        url: Optional[str],
        user: UserPublic,
        title: Optional[str] = None,
        original_name: Optional[str] = None,
    ) -> MetadataResponse:
        """Register a document URL and return its key and metadata.

        Raises:
            ValidationError: If the URL is missing or blank.
        """
        record = self.registry.get_or_create(
            url,
            DocumentPatch(title=title, original_name=original_name, requested_by=user.username),
        )
        if record is None:
            raise ValidationError("Document URL is required.")
        return MetadataResponse.from_record(record)
