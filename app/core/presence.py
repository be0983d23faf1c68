"""
Per-channel presence tracking.

Each channel is its own synchronized unit; the registry lock is only taken to
look up or create a channel. A user may hold several connections to one
channel (tabs, devices); they stay a member until the last one leaves. Every membership change (join, leave, expiry)
publishes a full ``sync`` hint and subscribers call ``snapshot`` again, so a
late or reordered notification can never leave a client with a stale set.

Presence is best-effort: failures are logged and never raised to callers.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Iterable, Optional

from app.core.notifier import HINT_PRESENCE_SYNC, FanoutNotifier, presence_topic
from app.infra.logging_config import get_logger

logger = get_logger("presence")

Clock = Callable[[], float]


class ChannelPresence:
    """Members of one channel, their open connections and the time of their last heartbeat."""

    def __init__(self, name: str, timeout: float, clock: Clock) -> None:
        self.name = name
        self._timeout = timeout
        self._clock = clock
        self._members: Dict[str, float] = {}
        self._connections: Dict[str, int] = {}
        self._retired = False
        self._lock = threading.Lock()

    def touch(self, user_id: str, connect: bool = False) -> Optional[bool]:
        """
        Record a heartbeat, and a new connection when ``connect`` is set.
        True when the user was not already a live member.

        None when the channel was retired concurrently; the caller must look it up again.
        """
        now = self._clock()
        with self._lock:
            if self._retired:
                return None
            seen = self._members.get(user_id)
            is_new = seen is None or now - seen > self._timeout
            self._members[user_id] = now
            if connect:
                self._connections[user_id] = self._connections.get(user_id, 0) + 1
            elif is_new:
                # A heartbeat from an unknown or expired user stands for one connection.
                self._connections.setdefault(user_id, 1)
            return is_new

    def release(self, user_id: str) -> bool:
        """Close one connection. True when it was the user's last and they left."""
        with self._lock:
            remaining = self._connections.get(user_id, 0) - 1
            if remaining > 0:
                self._connections[user_id] = remaining
                return False
            self._connections.pop(user_id, None)
            return self._members.pop(user_id, None) is not None

    def connection_count(self, user_id: str) -> int:
        with self._lock:
            return self._connections.get(user_id, 0)

    def expire(self) -> list[str]:
        cutoff = self._clock() - self._timeout
        with self._lock:
            stale = [uid for uid, seen in self._members.items() if seen < cutoff]
            for uid in stale:
                del self._members[uid]
                self._connections.pop(uid, None)
            return stale

    def members(self) -> frozenset[str]:
        cutoff = self._clock() - self._timeout
        with self._lock:
            return frozenset(
                uid for uid, seen in self._members.items() if seen >= cutoff
            )

    def has(self, user_id: str) -> bool:
        cutoff = self._clock() - self._timeout
        with self._lock:
            seen = self._members.get(user_id)
            return seen is not None and seen >= cutoff

    def retire_if_empty(self) -> bool:
        with self._lock:
            if not self._members:
                self._retired = True
            return self._retired


class PresenceTracker:
    def __init__(
        self,
        notifier: FanoutNotifier,
        timeout: float = 45.0,
        clock: Clock = time.monotonic,
    ) -> None:
        self._notifier = notifier
        self._timeout = timeout
        self._clock = clock
        self._channels: Dict[str, ChannelPresence] = {}
        self._registry_lock = threading.Lock()

    def _channel(self, name: str, create: bool = True) -> Optional[ChannelPresence]:
        with self._registry_lock:
            channel = self._channels.get(name)
            if channel is None and create:
                channel = ChannelPresence(name, self._timeout, self._clock)
                self._channels[name] = channel
            return channel

    def _touch(self, name: str, user_id: str, connect: bool = False) -> bool:
        while True:
            is_new = self._channel(name).touch(user_id, connect=connect)
            if is_new is not None:
                return is_new

    def _discard_if_empty(self, channel: ChannelPresence) -> None:
        with self._registry_lock:
            if self._channels.get(channel.name) is channel and channel.retire_if_empty():
                del self._channels[channel.name]

    def _sync(self, channel: str) -> None:
        try:
            self._notifier.publish(presence_topic(channel), HINT_PRESENCE_SYNC)
        except Exception as e:
            logger.warning("Presence sync for %s failed: %s", channel, e)

    def join(self, channel: str, user_id: str) -> frozenset[str]:
        """Open one connection for the user and return the full member set."""
        self._touch(channel, str(user_id), connect=True)
        logger.info("User %s joined %s", user_id, channel)
        self._sync(channel)
        return self.snapshot(channel)

    def leave(self, channel: str, user_id: str) -> bool:
        """Close one connection. The user leaves, and a sync goes out, only with the last one."""
        presence = self._channel(channel, create=False)
        if presence is None:
            return False
        removed = presence.release(str(user_id))
        self._discard_if_empty(presence)
        if removed:
            logger.info("User %s left %s", user_id, channel)
            self._sync(channel)
        return removed

    def leave_all(
        self, user_id: str, channels: Optional[Iterable[str]] = None
    ) -> list[str]:
        """
        Close one connection of the user in each channel (connection teardown).

        Without ``channels`` every channel the user is in is released. Returns
        the channels the user actually left.
        """
        if channels is None:
            with self._registry_lock:
                channels = [
                    name
                    for name, presence in self._channels.items()
                    if presence.has(str(user_id))
                ]
        return [name for name in dict.fromkeys(channels) if self.leave(name, user_id)]

    def connection_count(self, channel: str, user_id: str) -> int:
        presence = self._channel(channel, create=False)
        return 0 if presence is None else presence.connection_count(str(user_id))

    def heartbeat(self, channel: str, user_id: str) -> None:
        """Refresh liveness; a heartbeat after expiry re-joins and syncs."""
        try:
            if self._touch(channel, str(user_id)):
                self._sync(channel)
        except Exception as e:
            logger.warning("Heartbeat for %s on %s failed: %s", user_id, channel, e)

    def snapshot(self, channel: str) -> frozenset[str]:
        presence = self._channel(channel, create=False)
        if presence is None:
            return frozenset()
        return presence.members()

    def is_online(self, channel: str, user_id: str) -> bool:
        presence = self._channel(channel, create=False)
        return presence is not None and presence.has(str(user_id))

    def expire_stale(self) -> dict[str, list[str]]:
        """Drop members whose heartbeat is older than the timeout; sync affected channels."""
        with self._registry_lock:
            channels = list(self._channels.values())
        expired: dict[str, list[str]] = {}
        for presence in channels:
            stale = presence.expire()
            self._discard_if_empty(presence)
            if stale:
                expired[presence.name] = stale
                logger.info("Expired %s from %s", stale, presence.name)
                self._sync(presence.name)
        return expired

    def channels(self) -> list[str]:
        with self._registry_lock:
            return list(self._channels)
