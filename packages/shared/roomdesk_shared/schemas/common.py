from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class RequestType(str, Enum):
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"


class RequestStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ErrorDetail(BaseModel):
    code: str
    message: str
    status: int
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
