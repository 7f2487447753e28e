"""
KVPad Backend — Pydantic Request/Response Schemas
==================================================

What:  Pydantic models for the form posted to a document and for JSON responses.
Why:   The browser posts form-encoded fields with camelCase names (`newPassword`);
       validating them into a model keeps the access handler free of request parsing.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentForm(BaseModel):
    """
    What:  Fields of POST /<name>.
    Who:   Built by the documents route from the form body.

    Fields:
        content: Document text (used by the save action)
        action: None / "save", "setPassword" or "updatePassword"
        new_password: New secret; "" on updatePassword clears protection
    """
    model_config = ConfigDict(populate_by_name=True)

    content: Optional[str] = Field(default=None, description="Document text")
    action: Optional[str] = Field(default=None, description="save, setPassword or updatePassword")
    new_password: Optional[str] = Field(
        default=None,
        alias="newPassword",
        description="New secret; empty string removes the password on updatePassword",
    )


class ErrorResponse(BaseModel):
    """
    What:  Standardized JSON error body.

    Fields:
        error: Machine-readable error code (e.g., "validation_error")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and store status."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Key-value store backend and reachability, e.g. 'sql:connected'")
    uptime_seconds: float = Field(description="Seconds since service started")
