"""
Service request endpoints.

POST   /api/v1/requests          Raise a cleaning or maintenance request
GET    /api/v1/requests/active   Active request for a room and type
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.database import get_session_factory
from app.core.errors import InvalidInputError, error_responses
from app.services.requests import ActiveRequestQuery, RequestLedger, to_read
from roomdesk_shared.schemas.requests import (
    ActiveRequestResponse,
    ServiceRequestCreate,
    ServiceRequestCreated,
)
from roomdesk_shared.schemas.rooms import ROOM_ID_MAX

router = APIRouter()


def get_request_ledger(
    request: Request,
    session_factory=Depends(get_session_factory),
) -> RequestLedger:
    return RequestLedger(
        session_factory,
        timeout=request.app.state.settings.request_timeout_seconds,
    )


def get_active_request_query(session_factory=Depends(get_session_factory)) -> ActiveRequestQuery:
    return ActiveRequestQuery(session_factory)


def _parse_room_id(raw: Optional[str]) -> Optional[int]:
    value = (raw or "").strip()
    if not value:
        return None
    try:
        room_id = int(value)
    except ValueError:
        raise InvalidInputError("Invalid room_id") from None
    if not 1 <= room_id <= ROOM_ID_MAX:
        raise InvalidInputError("Invalid room_id")
    return room_id


@router.post(
    "",
    response_model=ServiceRequestCreated,
    status_code=201,
    responses=error_responses(400, 404, 409, 500),
)
async def create_request(
    body: ServiceRequestCreate,
    ledger: RequestLedger = Depends(get_request_ledger),
):
    """Create a request. The room is created and the user joined to it if needed."""
    created = await ledger.create_request(
        body.type,
        description=body.description,
        user_id=body.user_id,
        room_id=body.room_id,
        room_number=body.room_number,
        block=body.block,
    )
    return ServiceRequestCreated(message="Request created successfully", request=to_read(created))


@router.get(
    "/active",
    response_model=ActiveRequestResponse,
    responses=error_responses(400, 500),
)
async def get_active_request(
    request_type: Optional[str] = Query(None, alias="type"),
    room_id: Optional[str] = None,
    room_number: Optional[str] = None,
    block: Optional[str] = None,
    query: ActiveRequestQuery = Depends(get_active_request_query),
):
    """Active request for a room (by id, or by number + block). ``type`` defaults to cleaning."""
    found = await query.find_active(
        room_id=_parse_room_id(room_id),
        room_number=room_number,
        block=block,
        type=request_type,
    )
    if found is None:
        return ActiveRequestResponse(request=None)
    return ActiveRequestResponse(request=to_read(found.request, found.room, found.user))
