from enum import Enum
from typing import Optional
from pydantic import BaseModel

class EntityKind(str, Enum):
    DEVICE = "device"
    GATEWAY = "gateway"
    ORGANIZATION = "organization"
    APPLICATION = "application"

# Error kinds surfaced to API callers; mirrors app.core.errors
class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    STORE_UNAVAILABLE = "store_unavailable"
    CANCELLED = "cancelled"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    INTERNAL = "internal"

class ErrorResponse(BaseModel):
    error: ErrorKind
    detail: str
    retryable: bool = False
    operation: Optional[str] = None
