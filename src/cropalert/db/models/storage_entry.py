"""Key/value table backing the notification store's durable state."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from cropalert.db.base import Base, utcnow


class StorageEntryRow(Base):
    """One storage key. ``value`` is a JSON array or object tagged with ``schema_version``."""

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    schema_version: Mapped[str] = mapped_column(String(20), nullable=False, default="1")
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)
