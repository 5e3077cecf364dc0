"""
Armory API — Shared Schemas
=============================

Error and health payloads used across all routes, and the integer type
shared by every INTEGER column.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

# Range of the 32-bit INTEGER columns (primary keys included)
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def _reject_bool(value: Any) -> Any:
    # JSON true/false would otherwise coerce to 1/0
    if isinstance(value, bool):
        raise ValueError("expected an integer, got a boolean")
    return value


StorageInt = Annotated[
    int,
    BeforeValidator(_reject_bool),
    Field(ge=INT32_MIN, le=INT32_MAX),
]


class ErrorResponse(BaseModel):
    """
    Error body returned by every failing request.

    Example:
        {"error": "not found"}

    Clients distinguish client-caused from server-caused failures by the
    status code class (4xx vs 5xx). The request id travels in the
    X-Request-ID header.
    """
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
