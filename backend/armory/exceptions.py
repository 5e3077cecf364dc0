"""
Armory API — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the failure kinds a request can hit.
How:   Each exception carries a user-safe `message` and a `context` dict that
       is logged but never returned to the client. Global handlers registered
       in main.py translate them into JSON error responses.

Exception Hierarchy:
    ArmoryError (base)
    ├── MalformedRequestError    → 400 Bad Request (bad path id or body shape)
    ├── NotFoundError            → 404 Not Found
    ├── ValidationError          → 422 Unprocessable Entity
    └── StorageUnavailableError  → 500 Internal Server Error

A gateway never raises NotFoundError itself: absence is returned as None or
False and the router decides to raise it.
"""

from typing import Any, Dict, Optional


class ArmoryError(Exception):
    """
    Base exception for all Armory application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class MalformedRequestError(ArmoryError):
    """
    Raised when the request cannot be interpreted at all.

    When:  A path id that is not an integer, or a body that is neither a
           JSON object nor form data. Raised before any storage call.
    HTTP:  400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Malformed request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ArmoryError):
    """
    Raised when a requested record does not exist.

    HTTP:  404 Not Found, body `{"error": "not found"}`
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message="not found", context=ctx)


class ValidationError(ArmoryError):
    """
    Raised when supplied fields violate the schema or a storage constraint.

    When:  Wrong field type, unknown field, NOT NULL column set to null,
           uniqueness violation.
    HTTP:  422 Unprocessable Entity
    """

    status_code = 422

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class StorageUnavailableError(ArmoryError):
    """
    Raised when the database cannot be reached or an operation times out.

    HTTP:  500 Internal Server Error

    The response body is always generic. The operation, resource and id are
    kept in `context` for the server-side log only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
