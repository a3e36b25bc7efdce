"""
ContactKeeper Backend — User and Token Schemas
================================================

What:  Request bodies for registration and login, and the user/token
       response models.
How:   Each required field defaults to None with validate_default=True so
       a missing field reports the same message as an empty one.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator

MIN_PASSWORD_LENGTH = 6


def _normalize_email(v: Optional[str]) -> str:
    if not v:
        raise ValueError("Please include a valid email")
    try:
        result = validate_email(v, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please include a valid email") from None
    return result.normalized.lower()


class UserCreate(BaseModel):
    """Body of POST /api/users."""
    name: Optional[str] = Field(default=None, validate_default=True, max_length=255)
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Please add name")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> str:
        if v is None or len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Please enter a password with {MIN_PASSWORD_LENGTH} or more characters"
            )
        return v


class LoginRequest(BaseModel):
    """Body of POST /api/auth."""
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class TokenResponse(BaseModel):
    """Signed bearer token returned by registration and login."""
    token: str = Field(description="JWT to send in the x-auth-token header")


class UserResponse(BaseModel):
    """The logged-in user, without the password hash."""
    id: uuid.UUID
    name: str
    email: str
    created_at: datetime = Field(serialization_alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes; every stored timestamp is UTC
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    model_config = {"from_attributes": True}
