"""Tests for LocalBlobStore."""

import pytest

from app.adapters.blob_store import LocalBlobStore
from app.exceptions import InvalidMessageError, TransientIOError


@pytest.fixture
def store(tmp_path):
    return LocalBlobStore(tmp_path / "blobs", "http://cdn.local/a/", max_bytes=64)


def test_put_returns_url_and_writes_file(store, tmp_path):
    url = store.put(b"GIF89a....", "anim.gif", "image/gif")
    assert url.startswith("http://cdn.local/a/")
    assert url.endswith(".gif")
    name = url.rsplit("/", 1)[1]
    assert (tmp_path / "blobs" / name).read_bytes() == b"GIF89a...."


def test_content_type_guessed_from_filename(store):
    assert store.put(b"jpegbytes", "photo.jpg").startswith("http://cdn.local/a/")


def test_rejects_empty(store):
    with pytest.raises(InvalidMessageError):
        store.put(b"", "empty.png", "image/png")


def test_rejects_too_large(store):
    with pytest.raises(InvalidMessageError):
        store.put(b"x" * 65, "big.png", "image/png")


def test_rejects_non_image(store):
    with pytest.raises(InvalidMessageError):
        store.put(b"%PDF-1.7", "doc.pdf", "application/pdf")


def test_unwritable_root_is_transient(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    store = LocalBlobStore(blocker / "blobs", "http://cdn.local")
    with pytest.raises(TransientIOError):
        store.put(b"\x89PNG", "a.png", "image/png")
