"""
Identity store and resident registration / sign-in.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import hash_password, verify_password
from app.core.database import is_unique_violation
from app.core.errors import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    MissingRoomReferenceError,
)
from app.models.user import User
from app.services.rooms import MembershipRegistrar, RoomResolver, clean
from roomdesk_shared.schemas.users import SignUpRequest

log = structlog.get_logger()


class IdentityStore:
    """Read access to user records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


async def register_user(session: AsyncSession, req: SignUpRequest) -> User:
    """Create a user and, when a room is declared, the room and membership.

    Runs on the caller's session; nothing is committed here.
    """
    identities = IdentityStore(session)
    if await identities.get_by_email(req.email):
        log.info("user.duplicate_email", email=req.email)
        raise EmailAlreadyRegisteredError()

    room_name = clean(req.room_name)
    block = clean(req.block)
    if room_name and not block:
        raise MissingRoomReferenceError("block is required when room_name is provided")

    user = User(
        name=req.name.strip(),
        email=req.email,
        password_hash=hash_password(req.password),
        block=block or None,
        room_name=room_name or None,
        phone=clean(req.phone) or None,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        if is_unique_violation(exc, "ix_users_email", "users.email"):
            raise EmailAlreadyRegisteredError() from exc
        raise

    if room_name:
        room = await RoomResolver(session).resolve(room_number=room_name, block=block)
        await MembershipRegistrar(session).ensure_member(room.id, room.block, user.id)

    log.info("user.registered", user_id=str(user.id), has_room=bool(room_name))
    return user


async def authenticate(session: AsyncSession, email: str, password: str) -> User:
    """Verify email/password. Unknown email and wrong password fail the same way."""
    user = await IdentityStore(session).get_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        log.info("user.sign_in_failed", email=email)
        raise InvalidCredentialsError()

    log.info("user.signed_in", user_id=str(user.id))
    return user
