"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from cropalert.db.models.storage_entry import StorageEntryRow

__all__ = [
    "StorageEntryRow",
]
