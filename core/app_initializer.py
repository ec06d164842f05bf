"""Application initialization orchestrator."""

from __future__ import annotations

import asyncio
import os
import random
from contextlib import suppress
from typing import Optional

from aiohttp import web as aiohttp_web
from aiohttp_wsgi import WSGIHandler

from config import Config, load_config
from core.logger import get_logger
from database import init_db_pool, run_migrations
from services.cache import LedgerCache
from services.contestants import ContestantSource
from services.raffle_service import RaffleService
from services.winner_store import LocalWinnerStore, RemoteWinnerStore, WinnerLedger
from utils.performance import PerformanceMonitor

logger = get_logger(__name__)


def build_ledger(config: Config, pool=None, monitor: Optional[PerformanceMonitor] = None) -> WinnerLedger:
    """Assemble the winner ledger the configuration asks for."""
    remote = None
    if config.remote_store_enabled:
        remote = RemoteWinnerStore(
            base_url=config.remote_store_url,
            api_key=config.remote_store_key,
            table=config.remote_store_table,
            timeout=config.remote_store_timeout,
        )
        logger.info("Remote winner store enabled, local cache used as fallback")
    else:
        logger.info("Remote winner store not configured, using local cache only")

    return WinnerLedger(
        local=LocalWinnerStore(pool),
        remote=remote,
        cache=LedgerCache(ttl=config.ledger_cache_ttl),
        monitor=monitor,
    )


class ApplicationInitializer:
    """Orchestrates application initialization and lifecycle."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or load_config()
        self.db_pool = None
        self.ledger: Optional[WinnerLedger] = None
        self.raffle_service: Optional[RaffleService] = None
        self.web_runner = None
        self.monitor = PerformanceMonitor()

    async def initialize(self) -> None:
        """Initialize all application components."""
        await self._init_database()
        self._init_services()
        await self._init_web_server()

    async def run(self) -> None:
        """Serve until cancelled."""
        try:
            while True:
                await asyncio.sleep(3600)
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        """Cleanup resources."""
        with suppress(Exception):
            if self.web_runner:
                await self.web_runner.cleanup()
        with suppress(Exception):
            if self.ledger:
                await self.ledger.close()
        with suppress(Exception):
            if self.db_pool:
                await self.db_pool.close()
        logger.info("Shutdown complete")

    async def _init_database(self) -> None:
        """Initialize database pool and run migrations."""
        self.db_pool = await init_db_pool(
            database_path=self.config.database_path,
            pool_size=self.config.db_pool_size,
            busy_timeout_ms=self.config.db_busy_timeout,
        )
        await run_migrations(self.db_pool)
        self.monitor.record_db_pool(self.db_pool.size)
        logger.info("✅ Database initialized")

    def _init_services(self) -> None:
        """Wire the contestant source, ledger and draw service."""
        contestants = ContestantSource(self.config.data_folder)
        self.ledger = build_ledger(self.config, self.db_pool, self.monitor)

        if self.config.random_seed is not None:
            logger.warning(f"Draws are seeded with RANDOM_SEED={self.config.random_seed}")
            rng = random.Random(self.config.random_seed)
        else:
            rng = random.Random()

        self.raffle_service = RaffleService(
            ledger=self.ledger,
            contestants=contestants,
            rng=rng,
            monitor=self.monitor,
        )
        logger.info("✅ Services initialized")

    async def _init_web_server(self) -> None:
        """Initialize web server."""
        from web import create_app

        flask_app = create_app(
            self.config,
            raffle_service=self.raffle_service,
            db_pool=self.db_pool,
        )

        # Flask runs in aiohttp-wsgi worker threads, coroutines go back to this loop
        wsgi_handler = WSGIHandler(flask_app)

        aio_app = aiohttp_web.Application()
        aio_app.router.add_route("*", "/{path_info:.*}", wsgi_handler)

        self.web_runner = aiohttp_web.AppRunner(aio_app)
        await self.web_runner.setup()

        # Bind to PORT env var if present (Render/Heroku)
        effective_port = int(os.getenv("PORT", str(self.config.web_port)))
        effective_host = "0.0.0.0" if os.getenv("PORT") else self.config.web_host

        site = aiohttp_web.TCPSite(self.web_runner, effective_host, effective_port)
        await site.start()

        logger.info(f"🚀 Web server started on http://{effective_host}:{effective_port}")
