"""
Menu API Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the different failure outcomes.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the JSON envelopes the API clients expect.
Who:   Raised by services and the validation layer; caught by the handlers.

Exception Hierarchy:
    MenuAPIError (base)
    ├── ValidationError     → 422 Unprocessable Entity (field error map)
    ├── NotFoundError       → 404 Not Found
    ├── ConflictError       → 409 Conflict (delete blocked by dependents)
    ├── FileStorageError    → 500 Internal Server Error
    └── DatabaseError       → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class MenuAPIError(Exception):
    """
    Base exception for all Menu API application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MenuAPIError):
    """
    Raised when client input fails validation.

    Carries a field → [messages] map. A single-field error can be raised with
    `field=` and the message is filed under that field.

    Example response (HTTP 422):
        {
            "success": false,
            "message": "Errores de validación",
            "errors": {"precio": ["El precio no puede ser negativo"]}
        }
    """

    def __init__(
        self,
        message: str = "Errores de validación",
        errors: Optional[Dict[str, List[str]]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        if errors is None:
            errors = {field: [message]} if field else {}
        self.errors = errors


class NotFoundError(MenuAPIError):
    """
    Raised when a requested record does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so routes stay free of existence checks.
    """

    def __init__(
        self,
        resource: str = "registro",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} no encontrado"
        if resource_id is not None:
            message = f"{resource.capitalize()} con ID {resource_id} no encontrado"
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(MenuAPIError):
    """
    Raised when an operation would orphan dependent records.

    When: Deleting a restaurant that still owns products or categories, or a
    category that still has products.
    """

    def __init__(
        self,
        message: str = "El registro tiene dependencias y no puede eliminarse",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(MenuAPIError):
    """
    Raised when writing an image to the storage volume fails.

    The client receives a generic 500 body; the OS error and path are only
    logged.
    """

    def __init__(
        self,
        message: str = "No se pudo guardar la imagen",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MenuAPIError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic. SQL text and
    constraint names stay in the server logs.
    """

    def __init__(
        self,
        message: str = "Ocurrió un error en la base de datos",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
