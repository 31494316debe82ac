"""Resident sign-up / sign-in schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SignUpRequest(BaseModel):
    """Register a resident, optionally declaring their room."""
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6)
    block: Optional[str] = None
    room_name: Optional[str] = None
    phone: Optional[str] = None


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserRead(BaseModel):
    """Public user record. The password hash is never included."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    block: Optional[str] = None
    room_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime


class SignUpResponse(BaseModel):
    message: str
    user: UserRead


class SignInResponse(BaseModel):
    message: str
    user: UserRead
    success: bool = True
