"""Bridge from Flask worker threads to the application's asyncio loop."""

from __future__ import annotations

import asyncio
import threading
from typing import Awaitable, Optional, TypeVar

from core.constants import RemoteStoreDefaults

_loop: Optional[asyncio.AbstractEventLoop] = None
T = TypeVar("T")

# Upper bound for a web request waiting on a coroutine; remote calls time out sooner
COROUTINE_TIMEOUT = RemoteStoreDefaults.TIMEOUT * 3


def set_main_loop(loop: Optional[asyncio.AbstractEventLoop]) -> None:
    global _loop
    _loop = loop


def get_main_loop() -> asyncio.AbstractEventLoop:
    if _loop is None:
        raise RuntimeError("Asyncio loop is not initialized")
    return _loop


def run_coroutine_sync(coro: Awaitable[T], timeout: Optional[float] = COROUTINE_TIMEOUT) -> T:
    """Run ``coro`` on the main loop and block the calling thread for its result.

    Must not be called from the main loop's own thread.
    """
    future = asyncio.run_coroutine_threadsafe(coro, get_main_loop())
    return future.result(timeout)


def start_background_loop() -> asyncio.AbstractEventLoop:
    """Run a fresh event loop in a daemon thread and register it as the main loop.

    Used when Flask is served without the aiohttp host, e.g. by the test client.
    """
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, name="asyncio-main", daemon=True)
    thread.start()
    set_main_loop(loop)
    return loop


def stop_background_loop(loop: asyncio.AbstractEventLoop) -> None:
    loop.call_soon_threadsafe(loop.stop)
    if _loop is loop:
        set_main_loop(None)
