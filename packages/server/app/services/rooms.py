"""
Room resolution and room membership.

Both components work on the caller's session and never commit: they are meant
to run inside a unit of work owned by someone else (request creation, sign-up),
so that everything they insert rolls back with it.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.database import is_unique_violation
from app.core.errors import (
    MissingRoomReferenceError,
    RoomMismatchError,
    RoomNotFoundError,
    StorageError,
)
from app.models.room import UNIQUE_ROOM_PER_BLOCK, Room
from app.models.room_member import RoomMember
from roomdesk_shared.schemas.rooms import ROOM_ID_MAX

log = structlog.get_logger()


def clean(value: Optional[str]) -> str:
    """Trim a user-supplied identifier; ``None`` becomes ``""``."""
    return value.strip() if value else ""


# ---------------------------------------------------------------------------
# Room Resolver
# ---------------------------------------------------------------------------


class RoomResolver:
    """Locate (or lazily create) exactly one room from a partial reference."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, room_id: int) -> Optional[Room]:
        if not 1 <= room_id <= ROOM_ID_MAX:
            return None
        return await self.session.get(Room, room_id)

    async def find(self, room_number: str, block: str) -> Optional[Room]:
        result = await self.session.execute(
            select(Room).where(Room.room_number == room_number, Room.block == block)
        )
        return result.scalar_one_or_none()

    async def lookup(
        self,
        room_id: Optional[int] = None,
        room_number: Optional[str] = None,
        block: Optional[str] = None,
    ) -> Optional[Room]:
        """Read-only resolution: an unknown room is ``None``, never an insert."""
        if room_id is not None:
            return await self.get(room_id)
        room_number, block = clean(room_number), clean(block)
        if not room_number or not block:
            raise MissingRoomReferenceError()
        return await self.find(room_number, block)

    async def resolve(
        self,
        room_id: Optional[int] = None,
        room_number: Optional[str] = None,
        block: Optional[str] = None,
    ) -> Room:
        """
        Resolve a room by id, or by (room_number, block), creating it if needed.

        With an id, a supplied block must match the stored one (case-insensitive).
        """
        block = clean(block)

        if room_id is not None:
            room = await self.get(room_id)
            if room is None:
                raise RoomNotFoundError()
            if block and room.block.casefold() != block.casefold():
                log.info("room.block_mismatch", room_id=room_id, block=block)
                raise RoomMismatchError()
            return room

        room_number = clean(room_number)
        if not room_number or not block:
            raise MissingRoomReferenceError()

        room = await self.find(room_number, block)
        if room is not None:
            return room
        return await self._create(room_number, block)

    async def _create(self, room_number: str, block: str) -> Room:
        room = Room(room_number=room_number, block=block)
        try:
            async with self.session.begin_nested():
                self.session.add(room)
        except IntegrityError as exc:
            if not is_unique_violation(
                exc, UNIQUE_ROOM_PER_BLOCK, "rooms.block, rooms.room_number"
            ):
                raise
            # Another caller committed the same pair first; use their row.
            log.info("room.insert_conflict", block=block, room_number=room_number)
            existing = await self.find(room_number, block)
            if existing is None:
                raise StorageError("Room insert conflicted but no room was found") from exc
            return existing

        log.info("room.created", room_id=room.id, block=block, room_number=room_number)
        return room


# ---------------------------------------------------------------------------
# Membership Registrar
# ---------------------------------------------------------------------------


class MembershipRegistrar:
    """Idempotently record that a user belongs to a room."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def is_member(self, room_id: int, block: str, user_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(RoomMember.user_id).where(
                RoomMember.room_id == room_id,
                RoomMember.block == block,
                RoomMember.user_id == user_id,
            )
        )
        return result.first() is not None

    async def ensure_member(self, room_id: int, block: str, user_id: uuid.UUID) -> bool:
        """Insert the membership edge if absent. Returns True if a row was inserted."""
        if await self.is_member(room_id, block, user_id):
            return False

        member = RoomMember(room_id=room_id, block=block, user_id=user_id)
        try:
            async with self.session.begin_nested():
                self.session.add(member)
        except IntegrityError:
            # A concurrent insert of the same edge is not an error.
            if await self.is_member(room_id, block, user_id):
                return False
            raise

        log.info("room_member.added", room_id=room_id, block=block, user_id=str(user_id))
        return True
