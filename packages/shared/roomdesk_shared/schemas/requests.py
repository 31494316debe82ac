"""Service request schemas for creation and active-request lookup."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .rooms import ROOM_ID_MAX, RoomRead
from .users import UserRead


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class ServiceRequestCreate(BaseModel):
    """
    Raise a cleaning or maintenance request.

    The room is referenced either by ``room_id`` or by ``room_number`` + ``block``.
    When ``user_id`` is given and the pair is incomplete, the user's declared
    room is used. ``type`` stays a plain string so that the service can report
    unsupported values itself.
    """
    type: str
    description: Optional[str] = None
    user_id: Optional[uuid.UUID] = None
    room_id: Optional[int] = Field(default=None, ge=1, le=ROOM_ID_MAX)
    room_number: Optional[str] = None
    block: Optional[str] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def _blank_user_id_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

class ServiceRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[uuid.UUID] = None
    room_id: int
    type: str
    status: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    room: Optional[RoomRead] = None
    user: Optional[UserRead] = None


class ServiceRequestCreated(BaseModel):
    message: str
    request: ServiceRequestRead


class ActiveRequestResponse(BaseModel):
    request: Optional[ServiceRequestRead] = None
