# citaplanner/api/dashboard/integrations.py
"""Notification dispatch history for the tenant dashboard"""
from typing import List

from fastapi import APIRouter, Depends, Query

from citaplanner.api.dependencies import get_store, get_tenant, require_roles
from citaplanner.models import Tenant, User, UserRole
from citaplanner.schemas.appointment import IntegrationLogResponse
from citaplanner.storage.base import Store

router = APIRouter(prefix="/integrations", tags=["Integrations"])


@router.get("/status", response_model=List[IntegrationLogResponse])
def integration_status(
        limit: int = Query(15, ge=1, le=100),
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(require_roles(UserRole.ADMIN))
):
    """Most recent notification dispatches of the current tenant, newest first."""
    return [
        IntegrationLogResponse(**log.to_dict())
        for log in store.list_integration_logs(tenant.id, limit=limit)
    ]
