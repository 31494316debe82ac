"""
Password hashing and registration service tests.

Tests cover:
- bcrypt hashing and verification, malformed hashes
- Registration with and without a declared room
- Authentication failures
"""

from __future__ import annotations

import pytest

from app.core.auth import hash_password, verify_password
from app.core.errors import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    MissingRoomReferenceError,
)
from app.models.room import Room
from app.models.user import User
from app.services import users as user_service
from roomdesk_shared.schemas.users import SignUpRequest

from .factories import TEST_PASSWORD, add_room, add_user, count, memberships


# ---------------------------------------------------------------------------
# Unit tests for password utilities
# ---------------------------------------------------------------------------

class TestPasswordHashing:

    def test_hash_and_verify(self):
        hashed = hash_password("s3cret!", rounds=4)
        assert hashed.startswith("$2")
        assert verify_password("s3cret!", hashed)
        assert not verify_password("S3cret!", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_malformed_hash_never_verifies(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


# ---------------------------------------------------------------------------
# Registration and sign-in
# ---------------------------------------------------------------------------

class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_reuses_existing_room(self, session_factory):
        room = await add_room(session_factory, "101", "BlockA")
        req = SignUpRequest(
            name="  Ada ", email="ada@example.com", password="secret1",
            block="BlockA", room_name="101", phone="  ",
        )
        async with session_factory() as session:
            async with session.begin():
                user = await user_service.register_user(session, req)

        assert user.name == "Ada"
        assert user.phone is None
        assert user.password_hash != "secret1"
        assert await count(session_factory, Room) == 1
        assert [m.room_id for m in await memberships(session_factory, user.id)] == [room.id]

    @pytest.mark.asyncio
    async def test_duplicate_email(self, session_factory):
        await add_user(session_factory, "ada@example.com")
        req = SignUpRequest(name="Ada", email="ada@example.com", password="secret1")
        async with session_factory() as session:
            with pytest.raises(EmailAlreadyRegisteredError):
                await user_service.register_user(session, req)

    @pytest.mark.asyncio
    async def test_room_name_requires_block(self, session_factory):
        req = SignUpRequest(name="Ada", email="ada@example.com", password="secret1", room_name="4")
        async with session_factory() as session:
            with pytest.raises(MissingRoomReferenceError):
                await user_service.register_user(session, req)
        assert await count(session_factory, User) == 0

    @pytest.mark.asyncio
    async def test_authenticate(self, session_factory):
        created = await add_user(session_factory, "bo@example.com")
        async with session_factory() as session:
            user = await user_service.authenticate(session, "bo@example.com", TEST_PASSWORD)
        assert user.id == created.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email, password",
        [("bo@example.com", "wrong"), ("nobody@example.com", TEST_PASSWORD)],
    )
    async def test_authenticate_failures(self, session_factory, email, password):
        await add_user(session_factory, "bo@example.com")
        async with session_factory() as session:
            with pytest.raises(InvalidCredentialsError):
                await user_service.authenticate(session, email, password)
