"""Room resolution: get-or-create by (kind, key), safe under concurrent creators."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.constants.rooms import RoomKind
from app.core.room_key import RoomKeyInput, build_room_key
from app.exceptions import ConflictError
from app.infra.logging_config import get_logger
from app.models.room import Room
from app.utils.db.errors import translate_storage_errors

logger = get_logger("rooms")


class RoomService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_room(self, room_id: UUID) -> Optional[Room]:
        return self.db.query(Room).filter(Room.id == room_id).first()

    def get_room_by_key(self, kind: RoomKind, key: str) -> Optional[Room]:
        return (
            self.db.query(Room)
            .filter(Room.kind == kind.value, Room.key == key)
            .first()
        )

    def _insert_room(self, kind: RoomKind, key: str) -> Room:
        """Insert inside a savepoint; a unique violation becomes ConflictError."""
        room = Room(kind=kind.value, key=key, last_seq=0)
        try:
            with self.db.begin_nested():
                self.db.add(room)
        except IntegrityError as e:
            raise ConflictError(f"Room {kind.value}:{key} created concurrently") from e
        self.db.commit()
        self.db.refresh(room)
        return room

    @translate_storage_errors
    def get_or_create_room(
        self, kind: RoomKind | str, key: RoomKeyInput = None
    ) -> tuple[Room, bool]:
        """
        Get the room for (kind, key) or create it. Returns (room, created).

        If another writer inserts the same key between our lookup and insert,
        the unique constraint rejects ours and the winner's row is returned.
        """
        kind, key = build_room_key(kind, key)
        room = self.get_room_by_key(kind, key)
        if room is not None:
            return room, False
        try:
            room = self._insert_room(kind, key)
        except ConflictError:
            logger.info("Lost room creation race for %s:%s, re-reading", kind, key)
            self.db.rollback()
            room = self.get_room_by_key(kind, key)
            if room is None:
                raise
            return room, False
        logger.info("Created %s room %s (%s)", kind.value, room.id, key)
        return room, True

    def resolve(self, kind: RoomKind | str, key: RoomKeyInput = None) -> UUID:
        room, _ = self.get_or_create_room(kind, key)
        return room.id

    def resolve_direct(self, user_id: UUID, peer_id: UUID) -> Room:
        room, _ = self.get_or_create_room(RoomKind.DIRECT, (user_id, peer_id))
        return room

    def list_direct_rooms_for(self, user_id: UUID) -> list[Room]:
        """Direct rooms a user participates in, most recently active first."""
        uid = str(user_id)
        rooms = (
            self.db.query(Room)
            .filter(
                Room.kind == RoomKind.DIRECT.value,
                (Room.key.like(f"{uid}:%")) | (Room.key.like(f"%:{uid}")),
            )
            .all()
        )
        return sorted(
            rooms,
            key=lambda r: (r.last_message_at is not None, r.last_message_at or r.created_at),
            reverse=True,
        )
