"""
Service request ledger and active-request lookup.

Handles:
- Creation of cleaning/maintenance requests as one unit of work
  (room resolution, membership, uniqueness check, insert)
- Lookup of the active request for a room and type
- Conversion of ORM rows to response schemas

The "one active request per (room, type)" rule is enforced by the partial
unique index on ``requests``; the existence check in the ledger only lets the
common case fail with a clean error before the insert.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from app.core.database import is_unique_violation
from app.core.errors import (
    ActiveRequestExistsError,
    InvalidRequestTypeError,
    MissingRoomReferenceError,
    StorageError,
    UserNotFoundError,
)
from app.models.room import Room
from app.models.service_request import UNIQUE_ACTIVE_REQUEST, ServiceRequest
from app.models.user import User
from app.services.rooms import MembershipRegistrar, RoomResolver, clean
from app.services.users import IdentityStore
from roomdesk_shared.schemas.common import RequestStatus, RequestType
from roomdesk_shared.schemas.requests import ServiceRequestRead
from roomdesk_shared.schemas.rooms import RoomRead
from roomdesk_shared.schemas.users import UserRead

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize_type(value: Optional[str], default: Optional[RequestType] = None) -> RequestType:
    """Map a raw type string (any case, padded) to a RequestType."""
    cleaned = clean(value).lower()
    if not cleaned and default is not None:
        return default
    try:
        return RequestType(cleaned)
    except ValueError:
        raise InvalidRequestTypeError() from None


def normalize_description(value: Optional[str]) -> Optional[str]:
    """Blank descriptions are stored as NULL, never as an empty string."""
    return clean(value) or None


@dataclass
class ActiveRequest:
    request: ServiceRequest
    room: Room
    user: Optional[User] = None


def to_read(
    request: ServiceRequest,
    room: Optional[Room] = None,
    user: Optional[User] = None,
) -> ServiceRequestRead:
    """Convert a ServiceRequest ORM object, optionally with its room and user."""
    return ServiceRequestRead(
        id=request.id,
        user_id=request.user_id,
        room_id=request.room_id,
        type=request.type,
        status=request.status,
        description=request.description,
        created_at=request.created_at,
        updated_at=request.updated_at,
        room=RoomRead.model_validate(room) if room is not None else None,
        user=UserRead.model_validate(user) if user is not None else None,
    )


# ---------------------------------------------------------------------------
# Request Ledger
# ---------------------------------------------------------------------------


class RequestLedger:
    """Creates service requests, each in its own transaction."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.timeout = timeout

    async def create_request(
        self,
        type: Optional[str],
        *,
        description: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
        room_id: Optional[int] = None,
        room_number: Optional[str] = None,
        block: Optional[str] = None,
    ) -> ServiceRequest:
        """
        Create an active request for a room.

        The room is given by ``room_id`` or by ``room_number`` + ``block``; when
        a user is given, their declared room fills in whatever is missing. The
        room is created on first reference and the user is registered as a
        member. Any failure rolls back everything, including the room and the
        membership.
        """
        request_type = normalize_type(type)
        description = normalize_description(description)

        try:
            return await asyncio.wait_for(
                self._create(request_type, description, user_id, room_id, room_number, block),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            log.error("request.create_timeout", timeout=self.timeout, room_id=room_id)
            raise StorageError("Request creation timed out") from exc
        except SQLAlchemyError as exc:
            log.error("request.create_failed", room_id=room_id, exc_info=exc)
            raise StorageError("Failed to create request") from exc

    async def _create(
        self,
        request_type: RequestType,
        description: Optional[str],
        user_id: Optional[uuid.UUID],
        room_id: Optional[int],
        room_number: Optional[str],
        block: Optional[str],
    ) -> ServiceRequest:
        room_number, block = clean(room_number), clean(block)

        async with self.session_factory() as session:
            async with session.begin():
                if user_id is not None:
                    user = await IdentityStore(session).get_by_id(user_id)
                    if user is None:
                        raise UserNotFoundError()
                    room_number = room_number or clean(user.room_name)
                    block = block or clean(user.block)

                if room_id is None and not (room_number and block):
                    raise MissingRoomReferenceError()

                room = await RoomResolver(session).resolve(room_id, room_number, block)

                if user_id is not None:
                    await MembershipRegistrar(session).ensure_member(room.id, room.block, user_id)

                if await self._has_active_request(session, room.id, request_type):
                    log.info("request.active_exists", room_id=room.id, type=request_type.value)
                    raise ActiveRequestExistsError()

                request = ServiceRequest(
                    room_id=room.id,
                    user_id=user_id,
                    type=request_type.value,
                    status=RequestStatus.ACTIVE.value,
                    description=description,
                )
                session.add(request)
                try:
                    await session.flush()
                except IntegrityError as exc:
                    if is_unique_violation(
                        exc, UNIQUE_ACTIVE_REQUEST, "requests.room_id, requests.type"
                    ):
                        log.info("request.active_exists", room_id=room.id, type=request_type.value)
                        raise ActiveRequestExistsError() from exc
                    raise

                await session.refresh(request)

        log.info(
            "request.created",
            request_id=request.id,
            room_id=request.room_id,
            type=request.type,
            user_id=str(user_id) if user_id else None,
        )
        return request

    @staticmethod
    async def _has_active_request(
        session: AsyncSession, room_id: int, request_type: RequestType
    ) -> bool:
        result = await session.execute(
            select(ServiceRequest.id).where(
                ServiceRequest.room_id == room_id,
                ServiceRequest.type == request_type.value,
                ServiceRequest.status == RequestStatus.ACTIVE.value,
            )
        )
        return result.first() is not None


# ---------------------------------------------------------------------------
# Active-Request Query
# ---------------------------------------------------------------------------


class ActiveRequestQuery:
    """Read-only lookup of the active request for a room and type."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_active(
        self,
        room_id: Optional[int] = None,
        room_number: Optional[str] = None,
        block: Optional[str] = None,
        type: Optional[str] = None,
    ) -> Optional[ActiveRequest]:
        """Return the active request, or None if the room or request does not exist.

        Storage failures raise StorageError; they are never reported as None.
        """
        request_type = normalize_type(type, default=RequestType.CLEANING)

        if room_id is None:
            room_number, block = clean(room_number), clean(block)
            if not room_number:
                raise MissingRoomReferenceError("room_id or room_number query parameter is required")
            if not block:
                raise MissingRoomReferenceError(
                    "block query parameter is required when using room_number"
                )

        try:
            async with self.session_factory() as session:
                room = await RoomResolver(session).lookup(room_id, room_number, block)
                if room is None:
                    return None

                result = await session.execute(
                    select(ServiceRequest, Room, User)
                    .join(Room, Room.id == ServiceRequest.room_id)
                    .outerjoin(User, User.id == ServiceRequest.user_id)
                    .where(
                        ServiceRequest.room_id == room.id,
                        ServiceRequest.type == request_type.value,
                        ServiceRequest.status == RequestStatus.ACTIVE.value,
                    )
                )
                row = result.one_or_none()
        except SQLAlchemyError as exc:
            log.error("request.lookup_failed", room_id=room_id, exc_info=exc)
            raise StorageError("Failed to retrieve active request") from exc

        if row is None:
            return None
        request, room, user = row
        return ActiveRequest(request=request, room=room, user=user)
