"""Storage adapters for message attachments."""

from app.adapters.blob_store import BaseBlobStore, LocalBlobStore

__all__ = ["BaseBlobStore", "LocalBlobStore"]
