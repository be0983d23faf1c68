"""Tests for attachment uploads."""

import pytest

from app.adapters.blob_store import LocalBlobStore, get_blob_store

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def blob_client(client, tmp_path):
    store = LocalBlobStore(tmp_path, "http://testserver/attachments", max_bytes=1024)
    client.app.dependency_overrides[get_blob_store] = lambda: store
    return client


def test_upload_image(blob_client, auth_headers, user_id, tmp_path):
    r = blob_client.post(
        "/attachments",
        files={"file": ("photo.png", PNG, "image/png")},
        headers=auth_headers(user_id),
    )
    assert r.status_code == 201
    url = r.json()["url"]
    assert url.startswith("http://testserver/attachments/")
    assert (tmp_path / url.rsplit("/", 1)[1]).read_bytes() == PNG


def test_upload_rejects_other_types(blob_client, auth_headers, user_id):
    r = blob_client.post(
        "/attachments",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(user_id),
    )
    assert r.status_code == 422


def test_upload_requires_auth(blob_client):
    r = blob_client.post("/attachments", files={"file": ("photo.png", PNG, "image/png")})
    assert r.status_code == 401


class RecordingBlobStore(LocalBlobStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.received = []

    def put(self, data, filename, content_type=None):
        self.received.append(len(data))
        return super().put(data, filename, content_type)


def test_oversized_upload_is_rejected_without_reading_it_all(
    client, auth_headers, user_id, tmp_path
):
    store = RecordingBlobStore(tmp_path / "blobs", "http://testserver/attachments", max_bytes=1024)
    client.app.dependency_overrides[get_blob_store] = lambda: store

    r = client.post(
        "/attachments",
        files={"file": ("big.png", PNG + b"\x00" * 8192, "image/png")},
        headers=auth_headers(user_id),
    )

    assert r.status_code == 422
    assert store.received == [1025]
    assert not (tmp_path / "blobs").exists()
