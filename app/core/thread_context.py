"""Reply-thread resolution over a window of messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol
from uuid import UUID

PREVIEW_ELLIPSIS = "…"


class ThreadableMessage(Protocol):
    id: UUID
    sender_id: UUID
    body: str
    reply_to: Optional[UUID]
    deleted_at: object


@dataclass(frozen=True)
class ThreadContext:
    message_id: UUID
    sender_id: UUID
    preview: str


def truncate_preview(body: str, length: int) -> str:
    body = " ".join((body or "").split())
    if len(body) <= length:
        return body
    return body[: max(length - 1, 0)].rstrip() + PREVIEW_ELLIPSIS


class ThreadIndex:
    """
    Index a message window by id so each reply lookup is a dict hit.

    A reply whose target is null, outside the window, or deleted resolves to
    None ("no context"); it is never an error.
    """

    def __init__(
        self, window: Iterable[ThreadableMessage], preview_length: int = 80
    ) -> None:
        self.preview_length = preview_length
        self._by_id: dict[UUID, ThreadableMessage] = {m.id: m for m in window}

    def __contains__(self, message_id: UUID) -> bool:
        return message_id in self._by_id

    def add(self, message: ThreadableMessage) -> None:
        self._by_id.setdefault(message.id, message)

    def missing_targets(self, messages: Iterable[ThreadableMessage]) -> set[UUID]:
        return {
            m.reply_to
            for m in messages
            if m.reply_to is not None and m.reply_to not in self._by_id
        }

    def resolve(self, message: ThreadableMessage) -> Optional[ThreadContext]:
        if message.reply_to is None:
            return None
        target = self._by_id.get(message.reply_to)
        if target is None or target.deleted_at is not None:
            return None
        return ThreadContext(
            message_id=target.id,
            sender_id=target.sender_id,
            preview=truncate_preview(target.body, self.preview_length),
        )

    def resolve_all(
        self, messages: Iterable[ThreadableMessage]
    ) -> dict[UUID, Optional[ThreadContext]]:
        return {m.id: self.resolve(m) for m in messages}
