"""
Authentication endpoints.

- Resident sign-up (optionally declaring block + room)
- Email/password sign-in (credential check only; no session token is issued)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.errors import error_responses
from app.services import users as user_service
from roomdesk_shared.schemas.users import (
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SignUpResponse,
    UserRead,
)

router = APIRouter()


@router.post(
    "/signup",
    response_model=SignUpResponse,
    status_code=201,
    responses=error_responses(400, 409),
)
async def sign_up(
    body: SignUpRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register a resident. A declared room is created and joined in the same transaction."""
    user = await user_service.register_user(session, body)
    return SignUpResponse(
        message="User registered successfully",
        user=UserRead.model_validate(user),
    )


@router.post("/signin", response_model=SignInResponse, responses=error_responses(400, 401))
async def sign_in(
    body: SignInRequest,
    session: AsyncSession = Depends(get_session),
):
    """Check email/password and return the user record."""
    user = await user_service.authenticate(session, body.email, body.password)
    return SignInResponse(
        message="Login successful",
        user=UserRead.model_validate(user),
        success=True,
    )
