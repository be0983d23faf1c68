"""
Fan-out of payload-free change hints to topic subscribers.

A hint only says "this topic changed"; subscribers re-read the room or the
presence snapshot. Delivery is at-least-once and publishers never block: each
subscription owns a bounded queue, and a subscriber whose backlog is full is
dropped rather than allowed to stall the topic.

With a hint bus attached (see ``app.core.hint_bus``) hints travel through
Redis so every API process delivers them to its own subscribers; without one
they are delivered in process.
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Protocol, Set
from uuid import UUID

from app.infra.logging_config import get_logger

logger = get_logger("notifier")

HINT_MESSAGES = "messages"
HINT_RECEIPTS = "receipts"
HINT_PRESENCE_SYNC = "sync"


def room_topic(room_id: UUID | str) -> str:
    return f"room:{room_id}"


def presence_topic(channel: str) -> str:
    return f"presence:{channel}"


@dataclass(frozen=True)
class ChangeHint:
    topic: str
    kind: str
    published_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def as_dict(self) -> dict[str, str]:
        return {
            "topic": self.topic,
            "kind": self.kind,
            "published_at": self.published_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChangeHint":
        return cls(
            topic=data["topic"],
            kind=data["kind"],
            published_at=datetime.fromisoformat(data["published_at"]),
        )


class HintBus(Protocol):
    def publish(self, hint: ChangeHint) -> bool: ...


class Subscription:
    """
    One subscriber's view of a topic. Not shared between consumers.

    ``waker`` is called from the publishing thread after every enqueue and on
    close; the websocket uses it to wake its event loop.
    """

    def __init__(
        self,
        notifier: "FanoutNotifier",
        topic: str,
        max_backlog: int,
        waker: Optional[Callable[[], None]] = None,
    ) -> None:
        self.topic = topic
        self._notifier = notifier
        self._queue: "queue.Queue[ChangeHint]" = queue.Queue(maxsize=max_backlog)
        self._closed = threading.Event()
        self._close_lock = threading.Lock()
        self._waker = waker

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def _wake(self) -> None:
        if self._waker is None:
            return
        try:
            self._waker()
        except RuntimeError as e:
            # The consumer's event loop is already gone.
            logger.debug("Could not wake subscriber on %s: %s", self.topic, e)

    def offer(self, hint: ChangeHint) -> bool:
        """Enqueue without blocking. False means the backlog is full."""
        if self.closed:
            return False
        try:
            self._queue.put_nowait(hint)
        except queue.Full:
            return False
        self._wake()
        return True

    def get(self, timeout: Optional[float] = None) -> Optional[ChangeHint]:
        """Next hint, or None on timeout or once the subscription is closed and drained."""
        if self.closed and self._queue.empty():
            return None
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[ChangeHint]:
        hints = []
        while True:
            try:
                hints.append(self._queue.get_nowait())
            except queue.Empty:
                return hints

    def close(self) -> bool:
        """Close and unsubscribe. True only for the call that actually closed it."""
        with self._close_lock:
            if self.closed:
                return False
            self._closed.set()
        self._notifier.unsubscribe(self)
        self._wake()
        return True


class FanoutNotifier:
    """Topic registry. Topics are independent; the registry lock only guards membership."""

    def __init__(self, max_backlog: int = 100) -> None:
        self.max_backlog = max_backlog
        self._topics: Dict[str, Set[Subscription]] = {}
        self._lock = threading.Lock()
        self._bus: Optional[HintBus] = None
        self.dropped_subscribers = 0

    def attach_bus(self, bus: Optional[HintBus]) -> None:
        """Route published hints through ``bus``; None goes back to in-process delivery."""
        self._bus = bus

    def subscribe(
        self, topic: str, waker: Optional[Callable[[], None]] = None
    ) -> Subscription:
        sub = Subscription(self, topic, self.max_backlog, waker=waker)
        with self._lock:
            self._topics.setdefault(topic, set()).add(sub)
        logger.debug("Subscribed to %s", topic)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._topics.get(sub.topic)
            if subs is None:
                return
            subs.discard(sub)
            if not subs:
                del self._topics[sub.topic]

    def publish(self, topic: str, kind: str = HINT_MESSAGES) -> int:
        """
        Publish a hint for topic. Returns the number of local subscribers it
        reached directly.

        With a bus attached the hint goes through the bus and comes back via
        ``deliver`` on every process, so 0 is returned. If the bus rejects it
        the hint is delivered locally instead.
        """
        hint = ChangeHint(topic=topic, kind=kind)
        bus = self._bus
        if bus is not None and bus.publish(hint):
            return 0
        return self.deliver(hint)

    def deliver(self, hint: ChangeHint) -> int:
        """
        Offer a hint to every local subscriber of its topic. Returns the number delivered.

        Subscribers with a full backlog are closed and removed.
        """
        with self._lock:
            subs = list(self._topics.get(hint.topic, ()))

        delivered = 0
        for sub in subs:
            if sub.offer(hint):
                delivered += 1
                continue
            if sub.close():
                logger.warning(
                    "Dropped slow subscriber on %s (backlog %s reached)",
                    hint.topic,
                    self.max_backlog,
                )
                with self._lock:
                    self.dropped_subscribers += 1
        return delivered

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._topics.get(topic, ()))

    def close_all(self) -> None:
        with self._lock:
            subs = [s for topic_subs in self._topics.values() for s in topic_subs]
        for sub in subs:
            sub.close()
