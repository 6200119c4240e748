"""Health checks and monitoring endpoints"""
from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from citaplanner.config.redis import get_redis

health_router = APIRouter()


@health_router.get("")
async def health_check(request: Request):
    """Basic health check"""
    return {"status": "healthy", "service": request.app.state.settings.APP_NAME}


def _check_store(store_provider) -> str:
    with store_provider() as store:
        store.ping()
    return "healthy"


@health_router.get("/detailed")
async def detailed_health_check(request: Request):
    """Detailed health check with dependencies"""
    settings = request.app.state.settings
    checks = {
        "api": "healthy",
        "storage": "unknown",
        "redis": "unknown",
        "overall": "unknown"
    }

    # Check storage backend
    try:
        checks["storage"] = await run_in_threadpool(_check_store, request.app.state.store_provider)
    except Exception as e:
        checks["storage"] = f"unhealthy: {str(e)}"

    # Check Redis (only used for the tenant cache and the Celery broker)
    if settings.TENANT_CACHE_ENABLED or settings.NOTIFICATIONS_ENABLED:
        try:
            redis_client = get_redis()
            await redis_client.ping()
            checks["redis"] = "healthy"
        except Exception as e:
            checks["redis"] = f"unhealthy: {str(e)}"
    else:
        checks["redis"] = "disabled"

    # Overall status
    if all(status in ("healthy", "disabled") for key, status in checks.items() if key != "overall"):
        checks["overall"] = "healthy"
    else:
        checks["overall"] = "degraded"

    return checks
