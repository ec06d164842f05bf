"""Base repository pattern for database operations."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

import aiosqlite

from core.exceptions import RepositoryError
from database.connection import OptimizedSQLitePool, get_db_pool

class BaseRepository:
    """Base repository with common database operations.

    Bound to an explicit pool; falls back to the process-wide pool when none
    is given.
    """

    def __init__(self, pool: Optional[OptimizedSQLitePool] = None) -> None:
        self._pool = pool

    @property
    def pool(self) -> OptimizedSQLitePool:
        return self._pool or get_db_pool()

    async def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        """Execute a write query and return the affected row count."""
        async with self.pool.connection() as conn:
            try:
                cursor = await conn.execute(query, params)
                await conn.commit()
            except aiosqlite.Error as exc:
                await conn.rollback()
                raise RepositoryError(f"Query failed: {exc}") from exc
            return cursor.rowcount

    async def fetch_all(self, query: str, params: Sequence[Any] = ()) -> List[aiosqlite.Row]:
        """Fetch all rows."""
        async with self.pool.connection() as conn:
            cursor = await conn.execute(query, params)
            return list(await cursor.fetchall())

    async def fetch_column(self, query: str, params: Sequence[Any] = ()) -> List[Any]:
        """Fetch first column from all rows."""
        rows = await self.fetch_all(query, params)
        return [row[0] for row in rows]
