from datetime import datetime, timezone
import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint
    Checks connectivity to the database and reports process uptime
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.time() - request.app.state.startup_time, 3)
    }

    try:
        request.app.state.database.ping()
        health_status["database"] = "connected"
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["database"] = f"error: {str(e)}"
        return JSONResponse(status_code=503, content=health_status)

    return health_status
