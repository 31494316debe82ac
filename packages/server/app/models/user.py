"""User model."""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from .base import UUIDMixin, created_at_field


class User(UUIDMixin, SQLModel, table=True):
    __tablename__ = "users"

    name: str = Field(nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)  # bcrypt; never serialized
    # Self-declared hint only; room_members is the source of truth.
    block: Optional[str] = None
    room_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime = created_at_field()
