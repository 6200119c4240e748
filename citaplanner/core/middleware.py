# citaplanner/core/middleware.py
"""Request middleware: correlation, access logging and tenant resolution"""
import uuid
import time
import logging
from starlette.requests import Request
from starlette.responses import JSONResponse

from citaplanner.core.exceptions import CitaPlannerError
from citaplanner.utils.my_logging import set_correlation_id, set_tenant

logger = logging.getLogger(__name__)

# Only API routes are tenant-scoped; health checks and docs are not
TENANT_SCOPED_PREFIX = "/api"


def _tenant_subdomain(request: Request):
    tenant = getattr(request.state, "tenant", None)
    return tenant.subdomain if tenant is not None else None


async def correlation_id_middleware(request: Request, call_next):
    """Reuse or mint an X-Correlation-ID and bind it to the logging context"""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = correlation_id
    set_correlation_id(correlation_id)

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """
    Access log for every request. The tenant is only known once the inner
    resolution middleware has run, so it is read back after the response.
    """
    start_time = time.time()
    correlation_id = getattr(request.state, "correlation_id", None)

    logger.debug(
        f"{request.method} {request.url.path} started",
        extra={"correlation_id": correlation_id, "host": request.headers.get("host")}
    )

    response = await call_next(request)

    duration_ms = round((time.time() - start_time) * 1000, 2)
    subdomain = _tenant_subdomain(request)
    log = logger.warning if response.status_code >= 500 else logger.info
    log(
        f"Request completed: {request.method} {request.url.path} -> {response.status_code}",
        extra={
            "correlation_id": correlation_id,
            "tenant": subdomain or "-",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
    )

    return response


async def tenant_resolution_middleware(request: Request, call_next):
    """
    Resolve the tenant from the Host header and attach it to request.state.
    Errors are rendered here since this runs outside the router's handlers.
    """
    if not request.url.path.startswith(TENANT_SCOPED_PREFIX):
        return await call_next(request)

    resolver = request.app.state.tenant_resolver
    try:
        tenant = await resolver.resolve(request.headers.get("host"))
    except CitaPlannerError as e:
        logger.info(f"Tenant not resolved for host '{request.headers.get('host')}': {e.kind}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    request.state.tenant = tenant
    set_tenant(tenant.subdomain)
    response = await call_next(request)
    response.headers["X-Tenant"] = tenant.subdomain
    return response
