"""
Snapbook Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, one per kind of failure a client can
       observe.
How:   Each exception carries a user-safe `message` and a `context` dict that
       is logged but only selectively returned. Global handlers in main.py
       turn them into JSON error responses.
Who:   Raised by services, dependencies and middleware.

Exception Hierarchy:
    SnapbookError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── FileTooLargeError        → 413 Payload Too Large
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── ImageConversionError     → 500 Internal Server Error
    ├── FileStorageError         → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    └── MetadataServiceError     → 502 Bad Gateway
"""

from typing import Any, Dict, Optional


class SnapbookError(Exception):
    """
    Base exception for all Snapbook application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only partly exposed)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnapbookError):
    """
    Raised when client input fails a business rule.

    Examples: blank partner names, a URL that is not a Spotify track,
    an upload that is not an image, asking a note memory for song metadata.
    Schema-level problems are still reported by FastAPI as 422.
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


class AuthenticationError(SnapbookError):
    """Raised when the X-User-ID header is missing or malformed."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SnapbookError):
    """
    Raised when a requested resource does not exist.

    Also used when the resource exists but belongs to a different user, so
    callers cannot discover other people's scrapbooks.
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


class FileTooLargeError(SnapbookError):
    """Raised when an upload exceeds the configured size ceiling."""

    def __init__(
        self,
        size: int,
        max_size: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"File too large ({round(size / 1024 / 1024)}MB). "
            f"Maximum is {round(max_size / 1024 / 1024)}MB."
        )
        ctx = context or {}
        ctx.update({"size": size, "max_size": max_size})
        super().__init__(message=message, context=ctx)
        self.size = size
        self.max_size = max_size


class ImageConversionError(SnapbookError):
    """
    Raised when a HEIC/HEIF image cannot be converted to JPEG.

    In a batch upload this only aborts the offending file; the standalone
    conversion endpoint reports it as a 500 with the decoder's message.
    """

    def __init__(
        self,
        message: str = "Image conversion failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(SnapbookError):
    """Raised when reading or writing a stored photo fails (disk full, EACCES...)."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MetadataServiceError(SnapbookError):
    """
    Raised when the primary song metadata lookup (oEmbed) fails.

    Failures of the secondary artist scrape never raise this; they only
    leave the artist empty.
    """

    def __init__(
        self,
        message: str = "Failed to fetch track info from Spotify",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SnapbookError):
    """
    Raised when a database operation fails unexpectedly.

    The client always gets a generic message; the context is logged only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SnapbookError):
    """Raised when a client exceeds the per-IP request rate limit."""

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
