"""
Redis pub/sub transport for change hints.

Every API process publishes hints to one Redis channel and runs a listener
that hands each received hint to its local FanoutNotifier, so a message
written through one worker wakes sockets held by any other. Redis pub/sub is
fire-and-forget; clients re-sync from storage on reconnect, so a hint lost
during a Redis outage only delays a refresh.
"""

from __future__ import annotations

import asyncio
import json
import random
from typing import Any, Callable, Optional

import redis
import redis.asyncio as aioredis

from app.config import get_settings
from app.core.notifier import ChangeHint
from app.infra.logging_config import get_logger

logger = get_logger("hint_bus")

HINT_CHANNEL = "moodlink:hints"
LISTEN_TIMEOUT_SECONDS = 1.0
MAX_LISTENER_BACKOFF_SECONDS = 30.0


class RedisHintBus:
    def __init__(
        self,
        redis_client: Any,
        async_redis_client: Any,
        channel: str = HINT_CHANNEL,
    ) -> None:
        self.redis_client = redis_client
        self.async_redis_client = async_redis_client
        self.channel = channel
        self._pubsub: Optional[Any] = None
        self._listener_task: Optional[asyncio.Task] = None
        self.published = 0
        self.received = 0

    def publish(self, hint: ChangeHint) -> bool:
        """Publish to every process. False when Redis is unavailable."""
        try:
            self.redis_client.publish(self.channel, json.dumps(hint.as_dict()))
        except redis.RedisError as e:
            logger.warning("Publishing hint for %s failed: %s", hint.topic, e)
            return False
        self.published += 1
        return True

    def handle_message(
        self, message: Optional[dict], deliver: Callable[[ChangeHint], Any]
    ) -> bool:
        """Decode one pub/sub message and deliver it. False for anything that is not a hint."""
        if not message or message.get("type") != "message":
            return False
        data = message["data"]
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            hint = ChangeHint.from_dict(json.loads(data))
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Discarding malformed hint on %s: %s", self.channel, e)
            return False
        self.received += 1
        deliver(hint)
        return True

    async def start(self, deliver: Callable[[ChangeHint], Any]) -> None:
        """Subscribe, then listen in a background task until ``stop``."""
        self._pubsub = self.async_redis_client.pubsub()
        await self._pubsub.subscribe(self.channel)
        self._listener_task = asyncio.create_task(self.listen(deliver))
        logger.info("Listening for hints on %s", self.channel)

    async def listen(self, deliver: Callable[[ChangeHint], Any]) -> None:
        consecutive_errors = 0
        while True:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=LISTEN_TIMEOUT_SECONDS
                )
            except redis.RedisError as e:
                consecutive_errors += 1
                delay = min(2 ** (consecutive_errors - 1), MAX_LISTENER_BACKOFF_SECONDS)
                delay += random.uniform(0, delay * 0.2)
                logger.error(
                    "Hint listener error (attempt %s), retrying in %.2fs: %s",
                    consecutive_errors,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)
                continue
            consecutive_errors = 0
            self.handle_message(message, deliver)

    async def stop(self) -> None:
        if self._listener_task is not None:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None
        try:
            if self._pubsub is not None:
                await self._pubsub.unsubscribe(self.channel)
                await self._pubsub.aclose()
            await self.async_redis_client.aclose()
        except redis.RedisError as e:
            logger.warning("Closing hint bus connections failed: %s", e)
        finally:
            self._pubsub = None


def build_hint_bus() -> Optional[RedisHintBus]:
    """Hint bus from settings, or None when REDIS_HOST is not configured."""
    settings = get_settings()
    if not settings.redis_host:
        return None
    return RedisHintBus(
        redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            socket_timeout=settings.storage_timeout_seconds,
        ),
        aioredis.Redis(host=settings.redis_host, port=settings.redis_port),
    )
