"""
Daily Diet Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the different error scenarios.
Why:   Targeted error handling with the right HTTP status and a client-safe
       message, instead of generic exceptions leaking internal details.
How:   Each exception carries a message and an optional context dict.
       Global handlers (registered in main.py) turn them into JSON responses.
Who:   Raised by services, the identity resolver and middleware.

Exception Hierarchy:
    DailyDietError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── UnauthorizedError        → 401 Unauthorized (no session)
    ├── NotFoundError            → 404 Not Found (missing OR not yours)
    ├── DatabaseError            → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

None of these is transient: every failure is a deterministic function of the
input and is never retried by the server.
"""

from typing import Any, Dict, List, Optional


class DailyDietError(Exception):
    """
    Base exception for all application errors.

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


class ValidationError(DailyDietError):
    """
    Raised when client input fails validation.

    When:    Missing required field on create, wrong type, unparseable date,
             explicit null on update.
    HTTP:    400 Bad Request

    Raised before any store access, so a rejected create/update never
    partially applies.

    Example response:
        {
            "error": "validation_error",
            "message": "Invalid meal data",
            "details": {"reasons": ["occurred_at: Unrecognized date '31/02/2024'"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        reasons: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        self.reasons = list(reasons or [])
        if self.reasons:
            ctx["reasons"] = self.reasons
        super().__init__(message=message, context=ctx)


class UnauthorizedError(DailyDietError):
    """
    Raised when a request carries no session identity.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Unauthorized.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DailyDietError):
    """
    Raised when a requested resource does not exist for the caller.

    When:    GET/PUT/DELETE /api/meals/{id} with an unknown id, or with the id
             of a meal owned by somebody else.
    HTTP:    404 Not Found

    The message is identical for both cases so a caller cannot probe for
    other owners' records. The resource id is kept in context for logs only.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found."
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(DailyDietError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the SQLAlchemy
    error type is only logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(DailyDietError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
