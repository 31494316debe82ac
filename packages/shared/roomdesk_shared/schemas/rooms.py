"""Room schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

# rooms.id is a 32-bit serial column.
ROOM_ID_MAX = 2**31 - 1


class RoomRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    block: str
    room_number: str
    created_at: datetime
