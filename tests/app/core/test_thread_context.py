"""Tests for ThreadIndex reply resolution."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from app.core.thread_context import ThreadIndex, truncate_preview


@dataclass
class Msg:
    id: UUID
    sender_id: UUID
    body: str
    reply_to: Optional[UUID] = None
    deleted_at: Optional[datetime] = None


def test_resolves_reply_inside_window():
    alice = uuid4()
    original = Msg(uuid4(), alice, "hello there")
    reply = Msg(uuid4(), uuid4(), "hi!", reply_to=original.id)

    ctx = ThreadIndex([original, reply]).resolve(reply)

    assert ctx.message_id == original.id
    assert ctx.sender_id == alice
    assert ctx.preview == "hello there"


def test_no_reply_is_no_context():
    msg = Msg(uuid4(), uuid4(), "standalone")
    assert ThreadIndex([msg]).resolve(msg) is None


def test_target_outside_window_is_no_context():
    reply = Msg(uuid4(), uuid4(), "re", reply_to=uuid4())
    assert ThreadIndex([reply]).resolve(reply) is None


def test_deleted_target_is_no_context():
    original = Msg(uuid4(), uuid4(), "gone", deleted_at=datetime.now(timezone.utc))
    reply = Msg(uuid4(), uuid4(), "re", reply_to=original.id)
    assert ThreadIndex([original, reply]).resolve(reply) is None


def test_missing_targets_lists_only_unknown_ids():
    known = Msg(uuid4(), uuid4(), "a")
    outside = uuid4()
    window = [
        known,
        Msg(uuid4(), uuid4(), "b", reply_to=known.id),
        Msg(uuid4(), uuid4(), "c", reply_to=outside),
    ]
    assert ThreadIndex(window).missing_targets(window) == {outside}


def test_add_fills_in_fetched_target():
    target = Msg(uuid4(), uuid4(), "fetched later")
    reply = Msg(uuid4(), uuid4(), "re", reply_to=target.id)
    index = ThreadIndex([reply])
    index.add(target)
    assert index.resolve(reply).preview == "fetched later"


def test_resolve_all_over_long_window():
    window = [Msg(uuid4(), uuid4(), f"m{i}") for i in range(500)]
    replies = [Msg(uuid4(), uuid4(), "re", reply_to=m.id) for m in window[::2]]
    contexts = ThreadIndex(window + replies).resolve_all(replies)
    assert len(contexts) == 250
    assert all(ctx is not None for ctx in contexts.values())


def test_truncate_preview():
    assert truncate_preview("short", 10) == "short"
    assert truncate_preview("a" * 20, 10) == "a" * 9 + "…"
    assert truncate_preview("spaced   \n out", 80) == "spaced out"
    assert len(truncate_preview("word " * 50, 80)) <= 80
