"""
Teacher Dashboard Backend — Response Envelope
==============================================

What:  The uniform JSON wrapper every endpoint answers with.
How:   `ApiResponse[T]` is a generic Pydantic model; routes declare
       `response_model=ApiResponse[SomeData]` and FastAPI generates the
       OpenAPI docs from it. Error envelopes are produced by the global
       exception handlers in main.py with the same keys.

Envelope:
    {
        "success": true | false,
        "data": ...,            (omitted when absent)
        "message": "...",       (omitted when absent)
        "error": "not_found",   (errors only)
        "errors": [...],        (validation failures only)
        "timestamp": "2024-01-15T12:00:00Z"
    }
"""

from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FieldError(BaseModel):
    """One field-level validation message."""

    field: str = Field(description="Dotted path of the offending field")
    message: str = Field(description="Human-readable reason")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope. `data` carries the endpoint-specific payload."""

    success: bool = Field(default=True)
    data: Optional[T] = Field(default=None)
    message: Optional[str] = Field(default=None)
    error: Optional[str] = Field(default=None)
    errors: Optional[List[FieldError]] = Field(default=None)
    timestamp: datetime = Field(default_factory=utc_now)


class ErrorResponse(BaseModel):
    """Error envelope, documented on routes via `responses=`."""

    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[FieldError]] = Field(
        default=None, description="Field-level messages (validation failures only)"
    )
    timestamp: datetime = Field(default_factory=utc_now)


class HealthStatus(BaseModel):
    """Payload of GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(description="OK or degraded")
    database: str = Field(description="connected or disconnected")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(alias="uptimeSeconds", description="Seconds since startup")
