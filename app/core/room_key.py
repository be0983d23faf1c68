"""Room key derivation: one canonical key per logical room."""

from __future__ import annotations

from typing import Iterable, Union
from uuid import UUID

from app.constants.rooms import GENERAL_ROOM_KEY, Mood, RoomKind
from app.exceptions import InvalidRoomKeyError

RoomKeyInput = Union[str, Mood, Iterable[Union[str, UUID]], None]


def direct_room_key(user_a: UUID | str, user_b: UUID | str) -> str:
    """
    Build the key for a direct conversation.

    The pair is unordered: ids are normalised to UUID hex form and sorted, so
    both participants derive the same key without coordinating.
    """
    try:
        first, second = sorted((UUID(str(user_a)), UUID(str(user_b))), key=str)
    except ValueError as e:
        raise InvalidRoomKeyError("Direct room participants must be user ids") from e
    if first == second:
        raise InvalidRoomKeyError("A direct room needs two different users")
    return f"{first}:{second}"


def build_room_key(kind: RoomKind | str, key: RoomKeyInput = None) -> tuple[RoomKind, str]:
    """
    Normalise (kind, key) into the (kind, key) pair stored on Room.

    mood: key is one of Mood; general: key is ignored; direct: key is a pair of user ids.
    """
    try:
        kind = RoomKind(kind)
    except ValueError as e:
        raise InvalidRoomKeyError(f"Unknown room kind: {kind}") from e

    if kind == RoomKind.GENERAL:
        return kind, GENERAL_ROOM_KEY
    if kind == RoomKind.MOOD:
        try:
            return kind, Mood(str(key).strip().lower()).value
        except ValueError as e:
            raise InvalidRoomKeyError(f"Unknown mood: {key}") from e

    if key is None or isinstance(key, str):
        raise InvalidRoomKeyError("Direct rooms are keyed by a pair of user ids")
    pair = list(key)
    if len(pair) != 2:
        raise InvalidRoomKeyError("Direct rooms are keyed by exactly two user ids")
    return kind, direct_room_key(pair[0], pair[1])
