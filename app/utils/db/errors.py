"""Translate driver-level storage failures into the chat error taxonomy."""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from app.exceptions import TransientIOError

T = TypeVar("T")


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise timeouts and dropped connections as TransientIOError."""
    try:
        yield
    except PoolTimeoutError as e:
        raise TransientIOError(f"{operation}: storage pool timed out") from e
    except OperationalError as e:
        raise TransientIOError(f"{operation}: storage unavailable") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            raise TransientIOError(f"{operation}: storage connection lost") from e
        raise


def translate_storage_errors(func: Callable[..., T]) -> Callable[..., T]:
    """Decorator form of storage_errors, named after the wrapped function."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with storage_errors(func.__name__):
            return func(*args, **kwargs)

    return wrapper
