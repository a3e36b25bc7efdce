"""
ContactKeeper Backend — User SQLAlchemy Model
===============================================

What:  ORM model representing the `users` table.
Who:   Used by UserService for registration, login and the current-user lookup.

Table Design:
    - UUID primary key, generated in Python (portable across PostgreSQL and SQLite)
    - email: unique, stored lower-cased so lookups are case-insensitive
    - password: Argon2 hash, never serialized to API responses
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from contactkeeper.database import Base


class User(Base):
    """A registered account that owns contacts."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Argon2 password hash",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
