"""Row builders and counters used across the database-backed tests."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import func, select

from app.core.auth import hash_password
from app.models.room import Room
from app.models.room_member import RoomMember
from app.models.service_request import ServiceRequest
from app.models.user import User

TEST_PASSWORD = "correct-horse"


async def add_room(session_factory, room_number: str, block: str) -> Room:
    async with session_factory() as session:
        async with session.begin():
            room = Room(room_number=room_number, block=block)
            session.add(room)
        return room


async def add_user(
    session_factory,
    email: str = "resident@example.com",
    *,
    block: Optional[str] = None,
    room_name: Optional[str] = None,
) -> User:
    async with session_factory() as session:
        async with session.begin():
            user = User(
                name="Resident",
                email=email,
                password_hash=hash_password(TEST_PASSWORD, rounds=4),
                block=block,
                room_name=room_name,
            )
            session.add(user)
        return user


async def add_request(
    session_factory,
    room_id: int,
    type: str = "cleaning",
    status: str = "active",
    *,
    user_id: Optional[uuid.UUID] = None,
) -> ServiceRequest:
    async with session_factory() as session:
        async with session.begin():
            request = ServiceRequest(room_id=room_id, type=type, status=status, user_id=user_id)
            session.add(request)
        return request


async def count(session_factory, model) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def memberships(session_factory, user_id: uuid.UUID) -> list[RoomMember]:
    async with session_factory() as session:
        result = await session.execute(select(RoomMember).where(RoomMember.user_id == user_id))
        return list(result.scalars().all())


async def active_requests(session_factory, room_id: int) -> list[ServiceRequest]:
    async with session_factory() as session:
        result = await session.execute(
            select(ServiceRequest).where(
                ServiceRequest.room_id == room_id, ServiceRequest.status == "active"
            )
        )
        return list(result.scalars().all())
