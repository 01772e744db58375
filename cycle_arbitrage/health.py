"""
Read-only health endpoint for process supervisors.
"""

import time

from fastapi import FastAPI

from .scheduler import Scheduler
from .version import __version__


def create_health_app(scheduler: Scheduler) -> FastAPI:
    """
    Build the FastAPI app reporting liveness and per-network worker status.

    Args:
        scheduler: Running scheduler whose workers are reported
    """
    app = FastAPI(title="Cycle Arbitrage Health")
    started_at = time.time()

    @app.get("/api/health")
    async def health_check():
        """Liveness plus the last outcome of every network worker."""
        return {
            "status": "ACTIVE",
            "version": __version__,
            "uptime_sec": round(time.time() - started_at, 1),
            "networks": scheduler.status(),
        }

    return app
