"""Bounded retry with exponential backoff for transient storage failures."""

from __future__ import annotations

import random
import time
from typing import Callable, Optional, TypeVar

from app.config import get_settings
from app.exceptions import TransientIOError
from app.infra.logging_config import get_logger

logger = get_logger("retry")

T = TypeVar("T")

MAX_BACKOFF_SECONDS = 2.0


def call_with_retry(
    fn: Callable[[], T],
    *,
    attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[], None]] = None,
) -> T:
    """
    Call fn, retrying TransientIOError up to ``attempts`` times in total.

    Delay doubles on every attempt (with jitter) and is capped at
    MAX_BACKOFF_SECONDS. ``on_retry`` runs before each new attempt (e.g.
    rolling back the failed session). The last TransientIOError is re-raised
    so callers can surface a "try again" failure. Other exceptions propagate immediately.
    """
    settings = get_settings()
    attempts = attempts if attempts is not None else settings.storage_retry_attempts
    base_delay = (
        base_delay if base_delay is not None else settings.storage_retry_base_delay
    )

    attempt = 1
    while True:
        try:
            return fn()
        except TransientIOError as e:
            if attempt >= attempts:
                logger.error("Giving up after %s attempts: %s", attempt, e.message)
                raise
            delay = min(base_delay * (2 ** (attempt - 1)), MAX_BACKOFF_SECONDS)
            delay += random.uniform(0, delay * 0.1)
            logger.warning(
                "Transient storage failure (attempt %s/%s), retrying in %.2fs: %s",
                attempt,
                attempts,
                delay,
                e.message,
            )
            sleep(delay)
            if on_retry is not None:
                on_retry()
            attempt += 1
