"""
System endpoints.

Health checks and system status.
"""

from fastapi import APIRouter

from baatcheet.cache import StoreUnavailableError
from ..deps import ServicesDep

router = APIRouter()


@router.get("/status")
def get_status(services: ServicesDep):
    """
    Health check endpoint.

    Reports whether the ephemeral store answers a ping.
    """
    try:
        redis_ok = services.context.store.ping()
    except StoreUnavailableError:
        redis_ok = False

    return {
        "status": "healthy" if redis_ok else "degraded",
        "service": "baatcheet-api",
        "redis": "ok" if redis_ok else "unavailable"
    }
