"""
TourStack Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions let services signal a failure once and have the
       global handlers (registered in main.py) turn it into the right
       HTTP status and a `{"error": ...}` body.
How:   Each exception class carries a message and optional context dict.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    TourStackError (base)
    ├── ValidationError      → 400 Bad Request (client can fix)
    ├── NotFoundError        → 404 Not Found
    ├── UpstreamError        → upstream status (Google API said no)
    ├── ConfigurationError   → 500 (a required key is missing)
    ├── FileStorageError     → 500 Internal Server Error
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class TourStackError(Exception):
    """
    Base exception for all TourStack application errors.

    Attributes:
        message:  User-facing error description (returned as `error`)
        context:  Additional debug info (logged, not returned)
        details:  Optional payload returned to the client as `details`
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
        details: Any = None,
    ):
        self.message = message
        self.context = context or {}
        self.details = details
        super().__init__(self.message)


class ValidationError(TourStackError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, text too long, unsupported file type.
    HTTP:    400 Bad Request

    Raised before any outbound call is made, so an invalid request never
    costs an API quota hit.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        details: Any = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx, details=details)
        self.field = field


class NotFoundError(TourStackError):
    """
    Raised when a requested resource does not exist.

    Message format is "<Resource> not found" (e.g. "Template not found"),
    which is what the editor frontend matches on.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class UpstreamError(TourStackError):
    """
    Raised when a third-party API (Google Translate, TTS, Vision) answers
    with a non-2xx status.

    HTTP:    The upstream status code, relayed unchanged.
    Body:    {"error": <upstream error.message>, "details": <upstream payload>}
    """

    def __init__(
        self,
        status_code: int = 502,
        message: str = "Upstream service error",
        details: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context, details=details)
        self.status_code = status_code


class ConfigurationError(TourStackError):
    """Raised when an endpoint needs a setting that is not configured."""

    def __init__(
        self,
        message: str = "Service is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(TourStackError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TourStackError):
    """
    Raised when database operations fail unexpectedly.

    The message is the operation-level text ("Failed to fetch templates");
    the driver error is kept in `context` and only logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
