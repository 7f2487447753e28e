"""
KVPad Backend — Key-Value Entry SQLAlchemy Model
=================================================

What:  ORM model representing the `kv_entries` table.
Why:   Gives the SQL store a single generic mapping from string key to string value,
       so documents (`<name>`) and password records (`<name>_password`) share one table.
Who:   Used by SqlKeyValueStore and by Alembic for schema management.

Table Design Rationale:
    - key is the primary key: every store operation is a point lookup
    - value is TEXT: document bodies are unbounded (limited only by settings)
    - updated_at: last write time, handy when inspecting the table by hand
    - No foreign keys: a password record may exist without its document
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from kvpad.database import Base


class KVEntry(Base):
    """One key-value pair. Overwritten in place on every put (last write wins)."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(
        String(512),
        primary_key=True,
        comment="Document name, or document name plus the password suffix",
    )

    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="HTML-escaped document text, or a hex SHA-256 digest",
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this entry was last written (UTC)",
    )

    def __repr__(self) -> str:
        return f"<KVEntry(key='{self.key}', updated_at='{self.updated_at}')>"
