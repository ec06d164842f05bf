"""Services package."""

from .contestants import Contestant, ContestantSource, load_contestants
from .raffle import available_pool, draw, draw_uniform
from .cache import LedgerCache
from .winner_store import LocalWinnerStore, RemoteWinnerStore, Winner, WinnerLedger, WinnerStore
from .raffle_service import DrawResult, RaffleService
from .analytics_service import AnalyticsService
from .export import export_filename, export_winners_csv, filter_winners, iter_winners_csv
from .async_runner import set_main_loop, run_coroutine_sync, start_background_loop, stop_background_loop

__all__ = [
    # Contestant pools
    "Contestant",
    "ContestantSource",
    "load_contestants",
    # Draw engine
    "available_pool",
    "draw",
    "draw_uniform",
    # Persistence
    "LedgerCache",
    "LocalWinnerStore",
    "RemoteWinnerStore",
    "Winner",
    "WinnerLedger",
    "WinnerStore",
    # Orchestration and reporting
    "DrawResult",
    "RaffleService",
    "AnalyticsService",
    "export_filename",
    "export_winners_csv",
    "filter_winners",
    "iter_winners_csv",
    # Loop bridge
    "set_main_loop",
    "run_coroutine_sync",
    "start_background_loop",
    "stop_background_loop",
]
