"""Database schema migrations."""

from __future__ import annotations

from .connection import OptimizedSQLitePool


SCHEMA_SQL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS winners (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        department TEXT NOT NULL,
        supervisor TEXT NOT NULL,
        tickets INTEGER NOT NULL CHECK (tickets > 0),
        draw_type TEXT NOT NULL,
        draw_date TIMESTAMP NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_winners_draw_type ON winners(draw_type);",
    "CREATE INDEX IF NOT EXISTS idx_winners_draw_date ON winners(draw_date);",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_winners_campaign_name ON winners(draw_type, name);",
)


async def run_migrations(pool: OptimizedSQLitePool) -> None:
    async with pool.connection() as conn:
        await conn.execute("BEGIN")
        try:
            for statement in SCHEMA_SQL:
                await conn.execute(statement)
        except Exception:
            await conn.rollback()
            raise
        else:
            await conn.commit()
