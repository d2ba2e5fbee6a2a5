"""Storage entry repository."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cropalert.db.models.storage_entry import StorageEntryRow


class StorageRepository:
    """Async access to ``storage_entries``. Callers own the session and commit."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, key: str) -> StorageEntryRow | None:
        result = await self.session.execute(select(StorageEntryRow).where(StorageEntryRow.key == key))
        return result.scalar_one_or_none()

    async def put(self, key: str, value: Any, schema_version: str) -> StorageEntryRow:
        """Insert or overwrite the entry stored under ``key``."""
        row = await self.get(key)
        if row is None:
            row = StorageEntryRow(key=key, value=value, schema_version=schema_version)
            self.session.add(row)
        else:
            row.value = value
            row.schema_version = schema_version
        await self.session.flush()
        return row
