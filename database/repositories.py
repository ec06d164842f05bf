"""Winner table access for the local cache."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from database.base_repository import BaseRepository

WINNER_COLUMNS = ("id", "name", "department", "supervisor", "tickets", "draw_type", "draw_date")

class WinnerRepository(BaseRepository):
    """Repository for winner rows.

    Rows are exchanged as plain dicts keyed by :data:`WINNER_COLUMNS`;
    ``draw_date`` is stored as an ISO-8601 string.
    """

    async def insert(self, row: Dict[str, Any]) -> None:
        placeholders = ", ".join("?" * len(WINNER_COLUMNS))
        await self.execute(
            f"INSERT INTO winners ({', '.join(WINNER_COLUMNS)}) VALUES ({placeholders})",
            tuple(row[column] for column in WINNER_COLUMNS),
        )

    async def list_rows(self, draw_type: Optional[str] = None) -> List[Dict[str, Any]]:
        query = f"SELECT {', '.join(WINNER_COLUMNS)} FROM winners"
        params: tuple = ()
        if draw_type:
            query += " WHERE draw_type=?"
            params = (draw_type,)
        query += " ORDER BY draw_date DESC, rowid DESC"
        rows = await self.fetch_all(query, params)
        return [dict(row) for row in rows]

    async def names(self, draw_type: str) -> List[str]:
        return await self.fetch_column(
            "SELECT name FROM winners WHERE draw_type=?",
            (draw_type,),
        )

    async def delete(self, draw_type: Optional[str] = None) -> int:
        if draw_type:
            return await self.execute("DELETE FROM winners WHERE draw_type=?", (draw_type,))
        return await self.execute("DELETE FROM winners")
