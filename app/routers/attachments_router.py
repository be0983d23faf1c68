"""Attachment upload: stores bytes in the blob store and returns the URL."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.adapters.blob_store import BaseBlobStore, get_blob_store
from app.auth.identity import CurrentUser, get_current_user

attachments_router = APIRouter(prefix="/attachments", tags=["Attachment"])


@attachments_router.post("", status_code=201)
async def upload_attachment(
    file: UploadFile = File(...),
    _current_user: CurrentUser = Depends(get_current_user),
    blob_store: BaseBlobStore = Depends(get_blob_store),
) -> dict:
    """Store an image attachment and return its URL."""
    # Reading one byte past the limit is enough for put to reject the upload.
    data = await file.read(blob_store.max_bytes + 1)
    url = await run_in_threadpool(
        blob_store.put, data, file.filename or "upload", file.content_type
    )
    return {"url": url}
