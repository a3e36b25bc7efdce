"""
ContactKeeper Backend — Contact Request/Response Schemas
==========================================================

What:  Pydantic models defining the contacts API contract.
How:   FastAPI validates request bodies against these models before the
       route handler runs, so an invalid payload never reaches the database.
       Unknown keys (e.g. a client-supplied "owner" or "user") are ignored.

Partial updates:
    ContactUpdate leaves every field optional. Which fields the client
    actually sent is read from `model_fields_set` (see `changes()`), so
    "not supplied" and "supplied as empty/null" stay distinct.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


def _require_name(v: Optional[str]) -> str:
    if v is None or not v.strip():
        raise ValueError("Name is required")
    return v


class ContactCreate(BaseModel):
    """Body of POST /api/contacts. Only `name` is required."""
    # validate_default: a missing name runs the validator and reports
    # "Name is required" instead of pydantic's generic "Field required"
    name: Optional[str] = Field(default=None, validate_default=True, max_length=255)
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=64)
    type: Optional[str] = Field(default=None, max_length=64)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        return _require_name(v)


class ContactUpdate(BaseModel):
    """Body of PUT /api/contacts/{id}. Every field is optional."""
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=64)
    type: Optional[str] = Field(default=None, max_length=64)

    def changes(self) -> Dict[str, Any]:
        """
        The fields the client supplied, with their values.

        A null or blank `name` is left out: the stored name stays non-empty
        and the request still goes through the not-found/ownership checks.
        """
        fields = self.model_dump(include=self.model_fields_set)
        if "name" in fields and (fields["name"] is None or not fields["name"].strip()):
            del fields["name"]
        return fields


class ContactResponse(BaseModel):
    """
    What:  Full representation of a contact.
    Who:   Returned by every contacts endpoint except DELETE.

    JSON shape: {id, owner, name, email, phone, type, createdAt}
    """
    id: uuid.UUID = Field(description="Unique contact identifier")
    owner: uuid.UUID = Field(description="Identifier of the owning user")
    name: str = Field(description="Contact name")
    email: Optional[str] = Field(default=None, description="Email address")
    phone: Optional[str] = Field(default=None, description="Phone number")
    type: Optional[str] = Field(default=None, description="Category label")
    created_at: datetime = Field(
        serialization_alias="createdAt",
        description="When the contact was created (UTC ISO 8601)",
    )

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes; every stored timestamp is UTC
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    model_config = {"from_attributes": True}
