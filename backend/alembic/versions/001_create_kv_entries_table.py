"""Create kv_entries table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the single `kv_entries` table holding documents and password records.
How:   Portable column types only, so the same migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops the table entirely (all notes and passwords are lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "kv_entries",
        sa.Column(
            "key",
            sa.String(512),
            nullable=False,
            comment="Document name, or document name plus the password suffix",
        ),
        sa.Column(
            "value",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="HTML-escaped document text, or a hex SHA-256 digest",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this entry was last written (UTC)",
        ),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("kv_entries")
