"""Application entry point."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from config import load_config
from core import setup_logger
from core.app_initializer import ApplicationInitializer
from services import set_main_loop


async def main() -> None:
    """Main application entry point."""
    config = load_config()

    # Flask handlers submit coroutines to this loop
    loop = asyncio.get_running_loop()
    set_main_loop(loop)

    app = ApplicationInitializer(config)
    await app.initialize()
    await app.run()


if __name__ == "__main__":
    config = load_config()
    logger = setup_logger(
        name="",
        level=logging.DEBUG if config.debug else logging.INFO,
        log_file=str(Path(config.log_folder) / "raffle.log"),
        colored=True,
    )
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
    except Exception as e:
        logger.error(f"Application failed: {e}", exc_info=True)
        raise SystemExit(1)
