"""
Realtime websocket: streams change hints for subscribed topics.

Clients connect to ``/ws?topic=room:<id>&presence=<channel>``. Each hint is a
small JSON object ({"topic", "kind", "published_at"}); on receipt the client
re-fetches the room's messages or the presence snapshot. Clients send
``{"type": "heartbeat"}`` to stay present. Disconnecting releases this
connection from every joined channel and drops every subscription.
"""

from __future__ import annotations

import asyncio
from typing import List

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool

from app.auth.identity import HeaderIdentityProvider
from app.core.app_state import state
from app.core.notifier import Subscription, presence_topic
from app.exceptions import AuthenticationError
from app.infra.logging_config import get_logger

logger = get_logger("realtime")

router = APIRouter(tags=["Realtime"])


async def _forward_hints(
    websocket: WebSocket, subs: List[Subscription], wakeup: asyncio.Event
) -> None:
    while True:
        await wakeup.wait()
        wakeup.clear()
        for sub in subs:
            for hint in sub.drain():
                await websocket.send_json(hint.as_dict())
            if sub.closed:
                # Dropped for falling behind; the client must reconnect and re-sync.
                await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
                return


async def _receive_heartbeats(
    websocket: WebSocket, user_id: str, channels: List[str]
) -> None:
    while True:
        payload = await websocket.receive_json()
        if isinstance(payload, dict) and payload.get("type") == "heartbeat":
            for channel in channels:
                await run_in_threadpool(state.presence.heartbeat, channel, user_id)


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    topic: List[str] = Query(default=[]),
    presence: List[str] = Query(default=[]),
) -> None:
    try:
        user = HeaderIdentityProvider().current_user(websocket.headers)
    except AuthenticationError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = str(user.id)
    channels = list(dict.fromkeys(presence))
    topics = list(dict.fromkeys(topic + [presence_topic(c) for c in channels]))

    # Publishers run on worker threads; they wake this loop without blocking.
    loop = asyncio.get_running_loop()
    wakeup = asyncio.Event()

    def wake() -> None:
        loop.call_soon_threadsafe(wakeup.set)

    # Subscribe before accepting so hints published right after connect are queued.
    subs = [state.notifier.subscribe(t, waker=wake) for t in topics]
    joined: List[str] = []
    try:
        await websocket.accept()
        for channel in channels:
            await run_in_threadpool(state.presence.join, channel, user_id)
            joined.append(channel)
        logger.info("User %s connected to %s", user_id, topics)

        tasks = [
            asyncio.create_task(_forward_hints(websocket, subs, wakeup)),
            asyncio.create_task(_receive_heartbeats(websocket, user_id, channels)),
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Realtime connection for %s ended: %s", user_id, exc)
    finally:
        for sub in subs:
            sub.close()
        # No await here: a cancelled handler must still release its presence.
        if joined:
            state.presence.leave_all(user_id, joined)
        logger.info("User %s disconnected", user_id)
