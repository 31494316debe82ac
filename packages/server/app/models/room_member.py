"""Room membership (join table keyed by room, block and user)."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import created_at_field


class RoomMember(SQLModel, table=True):
    __tablename__ = "room_members"
    __table_args__ = (
        sa.ForeignKeyConstraint(
            ["room_id", "block"],
            ["rooms.id", "rooms.block"],
            name="fk_room_members_room",
            ondelete="CASCADE",
        ),
    )

    room_id: int = Field(primary_key=True)
    block: str = Field(primary_key=True)
    user_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid,
            sa.ForeignKey("users.id", name="fk_room_members_user", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    joined_at: datetime = created_at_field()
