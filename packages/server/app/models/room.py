"""Room model. Rooms are created lazily the first time a (block, room_number) is referenced."""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import created_at_field

UNIQUE_ROOM_PER_BLOCK = "unique_room_per_block"


class Room(SQLModel, table=True):
    __tablename__ = "rooms"
    __table_args__ = (
        sa.UniqueConstraint("block", "room_number", name=UNIQUE_ROOM_PER_BLOCK),
        # Target of the composite foreign key from room_members.
        sa.UniqueConstraint("id", "block", name="unique_room_block_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    block: str = Field(nullable=False)
    room_number: str = Field(nullable=False)
    created_at: datetime = created_at_field()
