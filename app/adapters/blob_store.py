"""
Blob store interface for message attachments.

The chat core stores only the URL returned by ``put``; bytes never reach the
database.
"""

from __future__ import annotations

import mimetypes
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from app.config import get_settings
from app.exceptions import InvalidMessageError, TransientIOError

ALLOWED_CONTENT_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp"}
)


class BaseBlobStore(ABC):
    """Contract for attachment storage backends."""

    max_bytes: int = 5 * 1024 * 1024

    @abstractmethod
    def put(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """Store bytes and return a public URL. Raise TransientIOError if the backend is unavailable."""
        ...


class LocalBlobStore(BaseBlobStore):
    """Writes attachments to a directory served under ``base_url``."""

    def __init__(
        self,
        root: str | Path,
        base_url: str,
        max_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def put(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        if not data:
            raise InvalidMessageError("Attachment is empty")
        if len(data) > self.max_bytes:
            raise InvalidMessageError("Attachment is too large")
        content_type = content_type or mimetypes.guess_type(filename)[0]
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise InvalidMessageError(f"Unsupported attachment type: {content_type}")

        extension = mimetypes.guess_extension(content_type) or Path(filename).suffix
        name = f"{uuid.uuid4().hex}{extension}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / name).write_bytes(data)
        except OSError as e:
            raise TransientIOError("Attachment storage unavailable") from e
        return f"{self.base_url}/{name}"


def get_blob_store() -> BaseBlobStore:
    """FastAPI dependency returning the configured blob store."""
    settings = get_settings()
    return LocalBlobStore(
        settings.blob_storage_dir,
        settings.blob_base_url,
        max_bytes=settings.max_attachment_bytes,
    )
