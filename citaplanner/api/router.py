"""
API router setup
Organized into: public, dashboard (JWT) and admin routes, all tenant-scoped
by the Host header
"""
from fastapi import APIRouter

from citaplanner.api.public import auth, booking
from citaplanner.api.dashboard import appointments, clients, integrations, professionals, services
from citaplanner.api.admin import tenants

api_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (tenant only, no token required)
# ============================================================================
api_router.include_router(auth.router)
api_router.include_router(booking.router)

# ============================================================================
# DASHBOARD ROUTES (JWT authentication required, except public catalog reads)
# ============================================================================
api_router.include_router(professionals.router)
api_router.include_router(services.router)
api_router.include_router(appointments.router)
api_router.include_router(clients.router)
api_router.include_router(integrations.router)

# ============================================================================
# ADMIN ROUTES (SUPERADMIN only)
# ============================================================================
api_router.include_router(tenants.router)
