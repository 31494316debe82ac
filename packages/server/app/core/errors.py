"""
Service error taxonomy.

Services raise these instead of HTTP exceptions; ``register_error_handlers``
renders them with the standard error envelope::

    {"error": {"code": "...", "message": "...", "status": 409}}

Input and conflict errors are expected, user-facing outcomes. ``StorageError``
is an operational fault and is logged with the underlying exception.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from roomdesk_shared.schemas.common import ErrorResponse

log = structlog.get_logger()


class ServiceError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Invalid input (400)
# ---------------------------------------------------------------------------

class InvalidInputError(ServiceError):
    status_code = 400
    code = "INVALID_INPUT"
    message = "Invalid request payload"


class InvalidRequestTypeError(InvalidInputError):
    code = "INVALID_TYPE"
    message = "Unsupported request type"


class MissingRoomReferenceError(InvalidInputError):
    code = "MISSING_ROOM_REFERENCE"
    message = "room_number and block or room_id is required"


# ---------------------------------------------------------------------------
# Authentication (401)
# ---------------------------------------------------------------------------

class AuthenticationError(ServiceError):
    status_code = 401
    code = "UNAUTHENTICATED"
    message = "Authentication failed"


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


# ---------------------------------------------------------------------------
# Not found (404)
# ---------------------------------------------------------------------------

class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class RoomNotFoundError(NotFoundError):
    code = "ROOM_NOT_FOUND"
    message = "Room not found"


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"
    message = "User not found"


# ---------------------------------------------------------------------------
# Conflict (409)
# ---------------------------------------------------------------------------

class ConflictError(ServiceError):
    status_code = 409
    code = "CONFLICT"
    message = "Conflict"


class ActiveRequestExistsError(ConflictError):
    code = "ACTIVE_REQUEST_EXISTS"
    message = "An active request already exists for this room and type"


class EmailAlreadyRegisteredError(ConflictError):
    code = "EMAIL_ALREADY_REGISTERED"
    message = "User with this email already exists"


class RoomMismatchError(ConflictError):
    # Clients see this as a bad request: they sent a block that contradicts the room id.
    status_code = 400
    code = "ROOM_MISMATCH"
    message = "Room does not belong to provided block"


# ---------------------------------------------------------------------------
# Storage (500)
# ---------------------------------------------------------------------------

class StorageError(ServiceError):
    status_code = 500
    code = "STORAGE_ERROR"
    message = "Storage operation failed"


# ---------------------------------------------------------------------------
# FastAPI wiring
# ---------------------------------------------------------------------------

def error_responses(*statuses: int) -> dict:
    """OpenAPI ``responses`` entries documenting the error envelope."""
    return {status: {"model": ErrorResponse} for status in statuses}


def error_body(code: str, message: str, status: int, details: object = None) -> dict:
    error: dict = {"code": code, "message": message, "status": status}
    if details is not None:
        error["details"] = details
    return {"error": error}


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if isinstance(exc, StorageError):
        log.error("http.storage_error", path=request.url.path, message=exc.message)
    else:
        log.info("http.service_error", path=request.url.path, code=exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.status_code),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body(InvalidInputError.code, InvalidInputError.message, 400, details),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
