"""
ContactKeeper Backend — Custom Exception Hierarchy
====================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return JSON error responses with the matching HTTP status code.
Who:   Raised by services and the authentication dependency; caught by
       global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    ContactKeeperError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized (missing/invalid token)
    ├── AuthorizationError       → 401 Unauthorized (caller is not the owner)
    ├── NotFoundError            → 404 Not Found
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class ContactKeeperError(Exception):
    """
    Base exception for all ContactKeeper application errors.

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


class ValidationError(ContactKeeperError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, malformed email, duplicate registration,
             bad login credentials.
    HTTP:    400 Bad Request

    The response lists every failed constraint:
        {"errors": [{"msg": "Name is required", "param": "name", "location": "body"}]}

    Either pass a ready-made ``errors`` list or a single ``message`` (and
    optional ``field``) which is turned into a one-item list.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        if errors is None:
            item: Dict[str, Any] = {"msg": message}
            if field:
                item["param"] = field
                item["location"] = "body"
            errors = [item]
        self.errors = errors


class AuthenticationError(ContactKeeperError):
    """
    Raised when a request carries no usable credential.

    When:    No token header, or the token fails signature/expiry/shape checks.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "No token, authorization denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(ContactKeeperError):
    """
    Raised when the caller is authenticated but does not own the record.

    When:    Update/delete of a contact whose owner differs from the caller.
             Always raised after the record's existence has been confirmed,
             so a missing record reports NotFoundError instead.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ContactKeeperError):
    """
    Raised when a requested resource does not exist.

    When:    PUT/DELETE /api/contacts/{id} with an unknown or malformed id.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; the service layer converts
    that None into this exception.
    """

    def __init__(
        self,
        resource: str = "Contact",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ContactKeeperError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, pool not initialized.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
