"""Health check blueprint."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from utils.performance import PerformanceMonitor


health_bp = Blueprint("health", __name__)
monitor = PerformanceMonitor()


@health_bp.route("/health")
def health_check():
    db_pool = current_app.config.get("DB_POOL")
    service = current_app.config.get("RAFFLE_SERVICE")
    ledger = service.ledger if service else None

    data = {
        "status": "ok" if ledger else "degraded",
        "db_pool_size": db_pool.size if db_pool else 0,
        "winner_store": ledger.active_backend if ledger else None,
        "ledger_cache": ledger.cache.stats() if ledger else None,
        "host": monitor.gather_host_metrics(),
    }
    return jsonify(data)
