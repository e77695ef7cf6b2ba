"""
Hoots Backend — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the error kinds the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       JSON error responses with the matching HTTP status code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    HootsError (base)
    ├── ValidationError      → 400 Bad Request
    ├── AuthenticationError  → 401 Unauthorized
    ├── ForbiddenError       → 403 Forbidden
    ├── NotFoundError        → 404 Not Found
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class HootsError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only partially returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(HootsError):
    """
    Raised when client input breaks a business rule.

    When:    Empty title/text, unknown category, empty comment text.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types, malformed UUIDs in the path)
    are still reported by FastAPI itself with 422.
    """

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


class AuthenticationError(HootsError):
    """
    Raised when a request arrives without a caller identity.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(HootsError):
    """
    Raised when the caller is not the author of the post or comment they
    are trying to change.

    HTTP:    403 Forbidden

    Always raised before any mutation, so the stored entity is untouched.
    """

    def __init__(
        self,
        message: str = "You're not allowed to do that!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(HootsError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown post id, or a comment id not present in the post.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(HootsError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP:    500 Internal Server Error

    The client always receives a generic message; the SQLAlchemy error type
    travels in `context` and is only logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
