"""Health check endpoint.

Reports database reachability through the process-wide Database
object. A failed probe triggers one reconnect attempt before the
check is reported as degraded.
"""

from fastapi import APIRouter

from bizdir import __version__
from bizdir.db.engine import database
from bizdir.db.redis_pool import get_redis, redis_available

router = APIRouter()


@router.get("/health")
async def health_check():
    checks = {"server": "ok", "version": __version__}

    checks["database"] = "ok" if await database.ensure_ready() else "error"

    if redis_available():
        try:
            await get_redis().ping()
            checks["redis"] = "ok"
        except Exception as e:
            checks["redis"] = f"error: {e}"
    else:
        checks["redis"] = "disabled"

    healthy = checks["database"] == "ok" and not checks["redis"].startswith("error")
    return {
        "success": True,
        "status": "healthy" if healthy else "degraded",
        **checks,
    }
