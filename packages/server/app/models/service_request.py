"""Service request model (cleaning / maintenance)."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin

UNIQUE_ACTIVE_REQUEST = "unique_active_request_per_room_type"


class ServiceRequest(TimestampMixin, SQLModel, table=True):
    __tablename__ = "requests"
    __table_args__ = (
        sa.CheckConstraint("type IN ('cleaning', 'maintenance')", name="requests_type_check"),
        sa.CheckConstraint(
            "status IN ('active', 'completed', 'cancelled')", name="requests_status_check"
        ),
        # At most one active request per (room, type).
        sa.Index(
            UNIQUE_ACTIVE_REQUEST,
            "room_id",
            "type",
            unique=True,
            postgresql_where=sa.text("status = 'active'"),
            sqlite_where=sa.text("status = 'active'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )
    room_id: int = Field(
        sa_column=sa.Column(
            sa.Integer, sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
        )
    )
    type: str = Field(nullable=False)  # cleaning | maintenance
    status: str = Field(
        default="active", nullable=False, sa_column_kwargs={"server_default": "active"}
    )  # active | completed | cancelled
    description: Optional[str] = None
