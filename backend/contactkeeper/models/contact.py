"""
ContactKeeper Backend — Contact SQLAlchemy Model
==================================================

What:  ORM model representing the `contacts` table.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by ContactService for CRUD operations.
When:  Instantiated on create; queried on list, update and delete.

Table Design:
    - UUID primary key: opaque, assigned at insert, never changes
    - owner: FK to users.id, set from the caller's identity at creation and
      never reassigned; deleting a user cascades to their contacts
    - email, phone, type: optional free text (NULL when not supplied)
    - created_at: UTC with timezone; default sort key (newest first)

Index on (owner, created_at DESC):
    Serves the only list query: "this user's contacts, newest first".
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from contactkeeper.database import Base


class Contact(Base):
    """
    A single address-book entry owned by one user.

    Lifecycle:
        1. Created via POST /api/contacts (owner = caller)
        2. Partially updated via PUT /api/contacts/{id} (owner only)
        3. Hard-deleted via DELETE /api/contacts/{id} (owner only)
    """

    __tablename__ = "contacts"

    # ── Primary Key ───────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Ownership ─────────────────────────────────────────────────────────
    owner: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="User who created the contact; immutable",
    )

    # ── Fields ────────────────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True, default=None)
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, default=None)
    type: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        default=None,
        comment="Free-form category label, e.g. personal or professional",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, owner={self.owner}, name='{self.name}')>"


Index("idx_contacts_owner_created_at", Contact.owner, Contact.created_at.desc())
