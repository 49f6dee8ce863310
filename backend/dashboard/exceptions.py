"""
Teacher Dashboard Backend — Custom Exception Hierarchy
=======================================================

What:  Application-specific exceptions for each failure the API reports.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the JSON envelope with the matching HTTP status code.
Who:   Raised by the auth gates, services and the persistence gateway.

Exception Hierarchy:
    DashboardError (base)
    ├── ValidationError          → 400 Bad Request (field-level `errors`)
    ├── AuthenticationError      → 401 Unauthorized (no identity / bad credentials)
    ├── ForbiddenError           → 403 Forbidden (invalid token / insufficient role)
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict (uniqueness)
    ├── ServiceUnavailableError  → 503 Service Unavailable (database locked)
    ├── DatabaseError            → 500 Internal Server Error
    └── StorageError             → 500 unless a service translates it first
"""

from typing import Any, Dict, List, Optional


class DashboardError(Exception):
    """
    Base exception for all dashboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DashboardError):
    """
    Raised when client input fails a business rule.

    HTTP: 400 Bad Request

    Example response:
        {
            "success": false,
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [{"field": "grade", "message": "Grade must be between 0 and 100"}],
            "timestamp": "2024-01-15T12:00:00Z"
        }
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors


class AuthenticationError(DashboardError):
    """
    Raised when no identity can be established.

    When:  Token absent, or login with a wrong credential pair.
    HTTP:  401 Unauthorized
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Access token required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(DashboardError):
    """
    Raised when a presented token is rejected or the role is insufficient.

    HTTP: 403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DashboardError):
    """Raised when a requested resource does not exist. HTTP: 404 Not Found"""

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(DashboardError):
    """
    Raised when a write would violate a uniqueness rule.

    When:  Advisory duplicate-email check hits, or the UNIQUE constraint fires
           because another request inserted the same email first.
    HTTP:  409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "A student with this email already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServiceUnavailableError(DashboardError):
    """
    Raised when the database is locked by another writer.

    HTTP:  503 Service Unavailable, with a Retry-After header.
    The request did not change anything; the caller may retry.
    """

    status_code = 503
    error_code = "service_unavailable"

    def __init__(
        self,
        message: str = "Database temporarily unavailable, please try again",
        retry_after: int = 1,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(DashboardError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP: 500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Detailed error
        info (SQL, constraint name) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(DashboardError):
    """
    Raised by the persistence gateway when a statement fails.

    Attributes:
        code: `unique`, `check`, `locked`, `unavailable`, or the driver's own
              error name (e.g. SQLITE_IOERR) when none of those apply.
    """

    UNIQUE = "unique"
    CHECK = "check"
    LOCKED = "locked"
    UNAVAILABLE = "unavailable"

    def __init__(
        self,
        code: str,
        message: str = "Storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["code"] = code
        super().__init__(message=message, context=ctx)
        self.code = code
