"""Pytest configuration and fixtures."""

import asyncio
import json
import os
import random
import sys
from pathlib import Path
from typing import List, Optional

import pytest
import pytest_asyncio

# Project root on sys.path so the top-level packages import without installation
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import Config
from core.constants import DrawType
from core.exceptions import RemoteStoreError
from database import OptimizedSQLitePool, run_migrations
from services.contestants import Contestant, ContestantSource
from services.winner_store import LocalWinnerStore, Winner, WinnerLedger, WinnerStore, sort_newest_first


DATASET_70 = [
    {"name": "Asha", "department": "India Messaging", "supervisor": "Priya Nair", "tickets": 5},
    {"name": "Bruno", "department": "International Messaging", "supervisor": "Daniel Brooks", "tickets": 10},
    {"name": "Chen", "department": "APAC", "supervisor": "Grace Tan", "tickets": 15},
    {"name": "Dev", "department": "India Messaging", "supervisor": "Vikram Rao", "tickets": 20},
]
DATASET_80 = [
    {"name": "Elena", "department": "International Messaging", "supervisor": "Claire Dubois", "tickets": 3},
    {"name": "Farah", "department": "APAC", "supervisor": "Marcus Lim", "tickets": 7},
]


def make_pool(*entries) -> List[Contestant]:
    """Build a pool from ``(name, tickets)`` pairs."""
    return [
        Contestant(name=name, department="APAC", supervisor="Grace Tan", tickets=tickets)
        for name, tickets in entries
    ]


def make_config(tmp_path: Path, **overrides) -> Config:
    values = dict(
        environment="test",
        debug=False,
        web_host="127.0.0.1",
        web_port=5000,
        secret_key="test-secret",
        admin_username="admin",
        admin_password="secret",
        database_path=str(tmp_path / "raffle.sqlite"),
        data_folder=str(tmp_path / "data"),
        log_folder=str(tmp_path / "logs"),
        db_pool_size=2,
        db_busy_timeout=1000,
        remote_store_url="",
        remote_store_key="",
        remote_store_table="winners",
        remote_store_timeout=2,
        ledger_cache_ttl=30,
        random_seed=None,
    )
    values.update(overrides)
    return Config(**values)


class FakeRemoteStore(WinnerStore):
    """In-memory stand-in for the hosted winner table."""

    name = "remote"

    def __init__(self) -> None:
        self.rows: List[Winner] = []
        self.failing = False
        self.calls: List[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if self.failing:
            raise RemoteStoreError(f"remote {operation} unavailable")

    async def list_winners(self, draw_type: Optional[DrawType] = None) -> List[Winner]:
        self._check("list")
        return sort_newest_first(w for w in self.rows if draw_type is None or w.draw_type == draw_type)

    async def add_winner(self, winner: Winner) -> None:
        self._check("add")
        self.rows.append(winner)

    async def clear_winners(self, draw_type: Optional[DrawType] = None) -> int:
        self._check("clear")
        before = len(self.rows)
        self.rows = [w for w in self.rows if draw_type is not None and w.draw_type != draw_type]
        return before - len(self.rows)


@pytest.fixture
def sample_pool() -> List[Contestant]:
    """The A:10, B:20, C:30 pool."""
    return make_pool(("A", 10), ("B", 20), ("C", 30))


@pytest.fixture
def dataset_dir(tmp_path) -> Path:
    """Small per-campaign datasets written to a temp data folder."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "contestants-70.json").write_text(json.dumps(DATASET_70), encoding="utf-8")
    (data_dir / "contestants-80.json").write_text(json.dumps(DATASET_80), encoding="utf-8")
    return data_dir


@pytest.fixture
def contestant_source(dataset_dir) -> ContestantSource:
    return ContestantSource(dataset_dir)


@pytest_asyncio.fixture
async def db_pool(tmp_path):
    """Migrated SQLite pool in a temp directory."""
    pool = OptimizedSQLitePool(str(tmp_path / "winners.sqlite"), pool_size=2, busy_timeout_ms=1000)
    await pool.init_pool()
    await run_migrations(pool)
    yield pool
    await pool.close()


@pytest.fixture
def local_store(db_pool) -> LocalWinnerStore:
    return LocalWinnerStore(db_pool)


@pytest.fixture
def fake_remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def ledger(local_store) -> WinnerLedger:
    """Ledger over the local cache only."""
    return WinnerLedger(local=local_store)


@pytest.fixture
def mirrored_ledger(local_store, fake_remote) -> WinnerLedger:
    """Ledger with the fake remote store in front of the local cache."""
    return WinnerLedger(local=local_store, remote=fake_remote)


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(20240917)
