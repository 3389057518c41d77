"""
Menu API Backend: Shared Schema Pieces
=======================================

What:  Error/health response models and the input coercions shared by the
       per-operation input models.
"""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic_core import PydanticCustomError

# Accepted encodings for boolean flags sent through HTML forms
AVAILABILITY_VALUES = {"true": True, "1": True, "false": False, "0": False}

# Primary and foreign keys are INTEGER (int4) columns
MAX_RECORD_ID = 2_147_483_647

RecordId = Annotated[int, Field(ge=1, le=MAX_RECORD_ID)]


def is_record_id(value: Any) -> bool:
    """True when `value` can be bound as an integer key without overflowing."""
    return isinstance(value, int) and 1 <= value <= MAX_RECORD_ID


def reject_null(value: Any) -> Any:
    """
    Used by update models: a field may be omitted, but a supplied null for a
    non-nullable column is treated like a missing required value.
    """
    if value is None:
        raise PydanticCustomError("missing", "Field required")
    return value


def parse_availability(value: Any) -> bool:
    """Normalizes true/false, 1/0 and their string forms to a bool."""
    if isinstance(value, bool):
        return value
    if value is None:
        raise PydanticCustomError("missing", "Field required")
    key = str(value).strip().lower()
    if key not in AVAILABILITY_VALUES:
        raise PydanticCustomError(
            "availability",
            "Value must be one of: true, false, 1, 0",
        )
    return AVAILABILITY_VALUES[key]


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models
# ══════════════════════════════════════════════════════════════════════════


class ValidationErrorResponse(BaseModel):
    """
    Body of every 422 response.

    Example:
        {
            "success": false,
            "message": "Errores de validación",
            "errors": {"nombre": ["El nombre del producto es obligatorio"]}
        }
    """
    success: bool = False
    message: str
    errors: Dict[str, List[str]]


class ErrorResponse(BaseModel):
    """Body of 404 / 409 / 500 responses. `error` is only set on 500."""
    success: bool = False
    message: str
    error: Optional[str] = Field(default=None, description="Detail for 500 responses")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Image storage: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
