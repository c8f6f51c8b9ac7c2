# backend/sellespro/routes/system.py
"""
System health endpoint.

Reports snapshot storage status and in-memory state counts for deployment
debugging.
"""

import time
from flask import Blueprint, current_app

from ..extensions import state_store
from ..services.snapshot_service import read_snapshot

system_bp = Blueprint("system", __name__)


def check_snapshot_health() -> dict:
    """
    Check that the snapshot row can be read.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        snapshot = read_snapshot()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": snapshot.to_dict() if snapshot else None,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Snapshot health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/api/health")
def health():
    state = state_store.state
    storage = check_snapshot_health()
    status_code = 200 if storage["status"] == "healthy" else 503
    return {
        "status": storage["status"],
        "storage": storage,
        "state": {
            "products": len(state.products),
            "users": len(state.users),
            "sales": len(state.sales),
            "active_shift": state.active_shift is not None,
        },
    }, status_code
