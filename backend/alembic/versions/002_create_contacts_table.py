"""Create contacts table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 00:00:01.000000+00:00

What:  Creates the `contacts` table, one row per address-book entry.
How:   `owner` references users.id with ON DELETE CASCADE; the
       (owner, created_at DESC) index serves the per-user list query.

Rollback: downgrade() drops the table entirely (all contacts are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "contacts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "owner",
            sa.Uuid(),
            nullable=False,
            comment="User who created the contact; immutable",
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column(
            "type",
            sa.String(64),
            nullable=True,
            comment="Free-form category label, e.g. personal or professional",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["owner"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "idx_contacts_owner_created_at",
        "contacts",
        ["owner", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_contacts_owner_created_at", table_name="contacts")
    op.drop_table("contacts")
