"""
ContactKeeper Backend — Shared Response Schemas
=================================================

What:  Pydantic models for messages, errors and the health check.
Who:   Used by route handlers as response models and by the exception
       handlers in main.py to document error bodies in OpenAPI.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. {"msg": "Contact removed"}."""
    msg: str = Field(description="Human-readable message")


class ErrorResponse(BaseModel):
    """
    Body for authentication, authorization, not-found and server errors.

    Example:
        {"msg": "Not authorized", "error": "not_authorized"}
    """
    msg: str = Field(description="Human-readable error description")
    error: str = Field(description="Machine-readable error code")


class ValidationErrorItem(BaseModel):
    """One failed input constraint."""
    msg: str = Field(description="What is wrong with the input")
    param: Optional[str] = Field(default=None, description="Offending field name")
    location: Optional[str] = Field(default=None, description="body, path, query or header")
    value: Optional[Any] = Field(default=None, description="The rejected value, when available")


class ValidationErrorResponse(BaseModel):
    """
    Body for 400 validation failures.

    Example:
        {"errors": [{"msg": "Name is required", "param": "name", "location": "body"}]}
    """
    errors: List[ValidationErrorItem]


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
