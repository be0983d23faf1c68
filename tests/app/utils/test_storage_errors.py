"""Tests for storage error translation."""

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from app.exceptions import TransientIOError
from app.utils.db.errors import storage_errors, translate_storage_errors


def test_operational_error_is_transient():
    with pytest.raises(TransientIOError) as exc_info:
        with storage_errors("append"):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
    assert exc_info.value.message.startswith("append")
    assert exc_info.value.status_code == 503


def test_pool_timeout_is_transient():
    with pytest.raises(TransientIOError):
        with storage_errors("list"):
            raise PoolTimeoutError("QueuePool limit reached")


def test_invalidated_connection_is_transient():
    err = DBAPIError("SELECT 1", {}, Exception("gone"), connection_invalidated=True)
    with pytest.raises(TransientIOError):
        with storage_errors("list"):
            raise err


def test_integrity_error_propagates():
    with pytest.raises(IntegrityError):
        with storage_errors("insert"):
            raise IntegrityError("INSERT", {}, Exception("unique"))


def test_decorator_uses_function_name():
    @translate_storage_errors
    def mark_read():
        raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

    with pytest.raises(TransientIOError) as exc_info:
        mark_read()
    assert "mark_read" in exc_info.value.message
