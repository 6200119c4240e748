"""
FastAPI application for CitaPlanner

Every /api request is bound to the tenant named by its Host header
"""
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.exc import SQLAlchemyError

from citaplanner.api.router import api_router
from citaplanner.config.settings import Settings, get_settings
from citaplanner.core.exceptions import CitaPlannerError, InfrastructureError
from citaplanner.core.middleware import (
    correlation_id_middleware,
    request_logging_middleware,
    tenant_resolution_middleware,
)
from citaplanner.core.monitoring import health_router
from citaplanner.services.tenant.tenant_cache import TenantCache
from citaplanner.services.tenant.tenant_resolver import TenantResolver
from citaplanner.storage.provider import StoreProvider, build_store_provider
from citaplanner.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    settings = app.state.settings
    setup_logging(settings=settings)
    print(f"{settings.APP_NAME} API starting up...")
    print(f"Storage backend: {settings.STORAGE_BACKEND}")
    print(f"Tenant routing: *.{settings.ROOT_DOMAIN} (fallback '{settings.MASTER_SUBDOMAIN}')")

    routes_by_tag = defaultdict(list)
    for route in app.routes:
        if isinstance(route, APIRoute):
            tag = route.tags[0] if route.tags else "other"
            for method in route.methods:
                routes_by_tag[tag].append((method, route.path, route.name))

    # Print grouped routes
    for tag, routes in sorted(routes_by_tag.items()):
        print(f"\n[{tag.upper()}]")
        for method, path, name in sorted(routes, key=lambda x: (x[1], x[0])):
            print(f"  {method:8} {path:50} ({name})")
    print()

    yield

    # Shutdown
    print(f"{settings.APP_NAME} API shutting down...")


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(CitaPlannerError)
    async def citaplanner_error_handler(request: Request, exc: CitaPlannerError):
        if exc.status_code >= 500:
            logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Storage failure on {request.method} {request.url.path}", exc_info=exc)
        error = InfrastructureError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "detail": "Request validation failed",
                "details": jsonable_encoder(exc.errors()),
            }
        )


def create_app(settings: Optional[Settings] = None,
               store_provider: Optional[StoreProvider] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    settings = settings or get_settings()
    store_provider = store_provider or build_store_provider(settings)

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Multi-tenant appointment scheduling",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    cache = None
    if settings.TENANT_CACHE_ENABLED:
        from citaplanner.config.redis import get_redis

        cache = TenantCache(get_redis(), ttl_seconds=settings.TENANT_CACHE_TTL_SECONDS)

    app.state.settings = settings
    app.state.store_provider = store_provider
    app.state.tenant_resolver = TenantResolver(settings, store_provider, cache=cache)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT"],
        allow_headers=["*"],
    )

    # Add custom middleware (last added runs first)
    app.middleware("http")(tenant_resolution_middleware)
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "service": f"{settings.APP_NAME} API",
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "citaplanner.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
