"""Pydantic schemas for presence snapshots."""

from __future__ import annotations

from pydantic import BaseModel


class PresenceSnapshot(BaseModel):
    channel: str
    users: list[str]
    count: int

    @classmethod
    def from_members(cls, channel: str, members) -> "PresenceSnapshot":
        users = sorted(members)
        return cls(channel=channel, users=users, count=len(users))
