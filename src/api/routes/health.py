"""Health check endpoint."""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from adapter.mongodb.connection import get_mongodb_client
from api.dependencies import JSON_FILE_BACKEND, MONGODB_BACKEND

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(request: Request):
    """Health check endpoint with storage status."""
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "services": {}
    }

    storage = getattr(request.app.state, "storage", None)
    backend = storage.backend if storage else None
    healthy = True

    if backend == MONGODB_BACKEND:
        try:
            mongo_client = get_mongodb_client()
            if mongo_client:
                mongo_client.admin.command('ping')
                message = "Connection successful"
            else:
                healthy = False
                message = "Connection failed"
        except Exception as e:
            healthy = False
            message = f"Connection error: {str(e)[:200]}"
    elif backend == JSON_FILE_BACKEND:
        try:
            storage.sessions.store.read()
            message = "Fallback JSON file store in use"
        except (OSError, ValueError) as e:
            healthy = False
            message = f"JSON store error: {str(e)[:200]}"
    else:
        healthy = False
        message = "Storage not initialized"

    health_status["services"]["storage"] = {
        "status": "healthy" if healthy else "unhealthy",
        "backend": backend,
        "message": message,
    }

    if not healthy:
        health_status["status"] = "degraded"
        logger.warning("Health check degraded", extra={"backend": backend, "reason": message})

    status_code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        content=health_status,
        status_code=status_code
    )
