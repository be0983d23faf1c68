"""
Optional rate limiting for message sends (per room kind and user).

Uses Redis when CHAT_RATE_LIMIT_PER_USER_PER_MINUTE is set.
If not set or Redis unavailable, no limit is applied.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

import redis

from app.config import get_settings
from app.infra.logging_config import get_logger

logger = get_logger("rate_limit")


@lru_cache(maxsize=1)
def get_redis_client() -> Optional[redis.Redis]:
    """Redis client for rate limiting, or None when REDIS_HOST is not configured."""
    settings = get_settings()
    if not settings.redis_host:
        return None
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        socket_timeout=settings.storage_timeout_seconds,
    )


def check_send_rate_limit(
    scope: str,
    user_id: str,
    redis_client: Optional[object],
    limit_per_minute: Optional[int],
) -> bool:
    """
    Check if (scope, user_id) is within rate limit.
    Returns True if allowed, False if rate limited.
    If redis_client or limit_per_minute is None, always returns True.
    """
    if redis_client is None or limit_per_minute is None or limit_per_minute <= 0:
        return True
    key = f"moodlink:ratelimit:{scope}:{user_id}"
    try:
        pipe = redis_client.pipeline()
        pipe.incr(key)
        pipe.expire(key, 60)
        results = pipe.execute()
        count = results[0] if results else 0
        return count <= limit_per_minute
    except Exception as e:
        logger.warning("Rate limit check failed, allowing request: %s", e)
        return True
