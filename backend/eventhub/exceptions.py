"""
EventHub Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the four failure kinds the
       resource contracts can produce.
How:   Each exception carries a machine-readable `code` (the kind), a short
       `tag` describing the specific reason, a human-readable `message`, and
       an optional `context` dict. Global handlers registered in main.py map
       them to HTTP status codes and a consistent JSON body.
Who:   Raised by the query engine, services and repositories; caught by the
       global handlers.

Exception Hierarchy:
    EventHubError (base)
    ├── ValidationError    → 400 Bad Request (client can fix and resubmit)
    ├── NotFoundError      → 404 Not Found
    ├── ConflictError      → 409 Conflict (uniqueness / referential integrity)
    └── PersistenceError   → 500 Internal Server Error (database failure)

Errors are raised at the point of detection and propagate un-wrapped. No
retries happen at this layer.
"""

from typing import Any, Dict, Iterable, Optional


class EventHubError(Exception):
    """
    Base exception for all EventHub application errors.

    Attributes:
        code:     Error kind, stable across releases (e.g. "not_found")
        tag:      Short machine-readable reason (e.g. "email already exists")
        message:  User-facing error description (safe to return in API response)
        context:  Additional info for the response `details` or for logging
    """

    code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        tag: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.tag = tag or self.code
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EventHubError):
    """
    Raised when client input fails validation.

    When:  Missing required fields, malformed email, unknown enum value,
           non-integer page/limit/id, reference to a missing related record.
    HTTP:  400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "tag": "missing required fields",
            "message": "Missing required field(s): email, name",
            "details": {"fields": ["email", "name"]}
        }
    """

    code = "validation_error"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        tag: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, tag=tag or "invalid input", context=ctx)
        self.field = field


class MissingFieldsError(ValidationError):
    """A create or update left one or more required fields empty."""

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(
            message=f"Missing required field(s): {', '.join(self.fields)}",
            tag="missing required fields",
            context={"fields": self.fields},
        )


class NotFoundError(EventHubError):
    """
    Raised when a requested record does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts
    that None into this exception.
    HTTP:  404 Not Found
    """

    code = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, tag=f"{resource} not found", context=ctx)


class ConflictError(EventHubError):
    """
    Raised when a write would break a uniqueness or referential-integrity rule.

    When:  A second user with the same email, a second category with the
           same name, or deleting a category that events still reference.
           Also raised when the database rejects a write with a constraint
           violation, so the pre-check and the constraint report the same way.
    HTTP:  409 Conflict
    """

    code = "conflict"
    status_code = 409

    def __init__(
        self,
        message: str = "The request conflicts with existing data",
        tag: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, tag=tag or "conflict", context=context)


class PersistenceError(EventHubError):
    """
    Raised when the database layer fails unexpectedly.

    When:  Connection lost mid-query, timeouts, driver errors.
    HTTP:  500 Internal Server Error

    The client only ever sees a generic message; the original exception type
    is kept in `context` and logged server-side.
    """

    code = "persistence_error"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
