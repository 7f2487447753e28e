"""
KVPad Backend — Custom Exception Hierarchy
===========================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured responses with correct HTTP status codes.

Exception Hierarchy:
    KVPadError (base)
    ├── CredentialDecodeError    → never surfaced; handler redirects to the prompt
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── MethodNotAllowedError    → 405 Method Not Allowed
    ├── StoreError               → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests
"""

from typing import Any, Dict, Optional


class KVPadError(Exception):
    """
    Base exception for all KVPad application errors.

    Attributes:
        message:  User-facing error description (safe to return in a response)
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


class CredentialDecodeError(KVPadError):
    """
    Raised when the `q` query parameter is not valid padding-stripped base64.

    Recovery:
        The access handler catches this and answers with a redirect to the
        credential-stripped URL. It must never reach the global handlers.
    """

    def __init__(
        self,
        message: str = "Invalid password format",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(KVPadError):
    """
    Raised when client input fails validation.

    When:    Unknown form action, missing secret for setPassword, oversized content.
    HTTP:    400 Bad Request
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


class MethodNotAllowedError(KVPadError):
    """Raised for any HTTP method the document surface does not serve (405)."""

    def __init__(
        self,
        method: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["method"] = method
        super().__init__(message="Method not allowed", context=ctx)
        self.method = method


class StoreError(KVPadError):
    """
    Raised when the key-value store cannot complete an operation.

    What:    Connection lost, table missing, driver error.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Keys and driver
        errors are logged server-side only. No retries are attempted.
    """

    def __init__(
        self,
        message: str = "The note store is unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(KVPadError):
    """
    Raised when a client exceeds the per-IP write rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header.
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
