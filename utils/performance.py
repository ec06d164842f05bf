"""Performance and draw metrics using Prometheus."""

from __future__ import annotations

import time
from contextlib import contextmanager

import psutil
from prometheus_client import Counter, Gauge, Histogram


draws_total = Counter("raffle_draws_total", "Completed draws", labelnames=("draw_type", "mode"))
winners_total = Counter("raffle_winners_total", "Winners persisted", labelnames=("draw_type",))
draw_duration = Histogram("raffle_draw_duration_seconds", "Draw plus persistence duration")
store_fallbacks_total = Counter(
    "winner_store_fallbacks_total",
    "Remote winner store failures absorbed by the local cache",
    labelnames=("operation",),
)
db_connections = Gauge("db_connection_pool_size", "DB connection pool size")


class PerformanceMonitor:
    def __init__(self) -> None:
        self.metrics = {
            "draws_total": draws_total,
            "winners_total": winners_total,
            "draw_duration": draw_duration,
            "store_fallbacks_total": store_fallbacks_total,
            "db_connections": db_connections,
        }

    @contextmanager
    def track_draw(self):
        start = time.perf_counter()
        try:
            yield
        finally:
            draw_duration.observe(time.perf_counter() - start)

    def record_draw(self, draw_type: str, mode: str, winners_count: int) -> None:
        draws_total.labels(draw_type=draw_type, mode=mode).inc()
        if winners_count:
            winners_total.labels(draw_type=draw_type).inc(winners_count)

    def record_fallback(self, operation: str) -> None:
        store_fallbacks_total.labels(operation=operation).inc()

    def record_db_pool(self, pool_size: int) -> None:
        db_connections.set(pool_size)

    def gather_host_metrics(self) -> dict:
        process = psutil.Process()
        memory_info = process.memory_info()
        return {
            "memory_rss": memory_info.rss,
            "cpu_percent": process.cpu_percent(interval=None),
        }
