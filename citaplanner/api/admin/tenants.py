# ============================================================================
# FILE: citaplanner/api/admin/tenants.py
# Tenant administration for the platform operator (SUPERADMIN)
# ============================================================================
import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status
from starlette.concurrency import run_in_threadpool

from citaplanner.api.dependencies import get_store, require_roles
from citaplanner.models import User
from citaplanner.schemas.tenant import TenantCreate, TenantResponse, TenantUpdate
from citaplanner.services.tenant.tenant_service import TenantService
from citaplanner.storage.base import Store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/tenants", tags=["Admin"])

# require_roles() with no roles admits SUPERADMIN only
require_superadmin = require_roles()


@router.get("", response_model=List[TenantResponse])
def list_tenants(
        store: Store = Depends(get_store),
        current_user: User = Depends(require_superadmin)
):
    return [TenantResponse(**t.to_dict()) for t in store.list_tenants()]


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
        data: TenantCreate,
        store: Store = Depends(get_store),
        current_user: User = Depends(require_superadmin)
):
    """Provision a tenant together with its first administrator."""
    tenant, _admin = TenantService.provision(store, data)
    return TenantResponse(**tenant.to_dict())


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
        tenant_id: str,
        data: TenantUpdate,
        request: Request,
        store: Store = Depends(get_store),
        current_user: User = Depends(require_superadmin)
):
    """Change name, status, plan, feature flags or time zone. The subdomain never changes."""
    tenant = await run_in_threadpool(TenantService.update, store, tenant_id, data)

    # Cached copies would otherwise keep the old status until the TTL expires
    await request.app.state.tenant_resolver.invalidate(tenant.subdomain)

    logger.info(f"Tenant '{tenant.subdomain}' updated by {current_user.id}")
    return TenantResponse(**tenant.to_dict())
