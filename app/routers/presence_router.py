"""Presence API: join, leave, heartbeat, snapshot."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response

from app.auth.identity import CurrentUser, get_current_user
from app.core.presence import PresenceTracker
from app.routers.utils.dependencies import get_presence
from app.schemas.presence import PresenceSnapshot

presence_router = APIRouter(prefix="/presence", tags=["Presence"])

ChannelName = Annotated[
    str, Path(min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_.:-]+$")
]


@presence_router.get("/{channel}", response_model=PresenceSnapshot)
def get_presence_snapshot(
    channel: ChannelName,
    _current_user: CurrentUser = Depends(get_current_user),
    presence: PresenceTracker = Depends(get_presence),
) -> PresenceSnapshot:
    return PresenceSnapshot.from_members(channel, presence.snapshot(channel))


@presence_router.post("/{channel}/join", response_model=PresenceSnapshot)
def join_channel(
    channel: ChannelName,
    current_user: CurrentUser = Depends(get_current_user),
    presence: PresenceTracker = Depends(get_presence),
) -> PresenceSnapshot:
    """Join a channel and return the full member set."""
    return PresenceSnapshot.from_members(
        channel, presence.join(channel, str(current_user.id))
    )


@presence_router.post("/{channel}/heartbeat", status_code=204)
def heartbeat(
    channel: ChannelName,
    current_user: CurrentUser = Depends(get_current_user),
    presence: PresenceTracker = Depends(get_presence),
) -> Response:
    presence.heartbeat(channel, str(current_user.id))
    return Response(status_code=204)


@presence_router.post("/{channel}/leave", status_code=204)
def leave_channel(
    channel: ChannelName,
    current_user: CurrentUser = Depends(get_current_user),
    presence: PresenceTracker = Depends(get_presence),
) -> Response:
    presence.leave(channel, str(current_user.id))
    return Response(status_code=204)
