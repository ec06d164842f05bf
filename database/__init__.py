"""Database package public API."""

from .connection import OptimizedSQLitePool, get_db_pool, init_db_pool, set_db_pool
from .migrations import run_migrations
from .repositories import WinnerRepository

__all__ = [
    "OptimizedSQLitePool",
    "get_db_pool",
    "init_db_pool",
    "set_db_pool",
    "run_migrations",
    "WinnerRepository",
]
