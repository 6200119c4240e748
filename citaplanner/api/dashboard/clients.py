# citaplanner/api/dashboard/clients.py
"""Tenant client records"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from citaplanner.api.dependencies import get_store, get_tenant, require_roles
from citaplanner.models import Client, Tenant, User, UserRole
from citaplanner.schemas.catalog import ClientCreate, ClientResponse
from citaplanner.storage.base import Store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("", response_model=List[ClientResponse])
def list_clients(
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.PROFESSIONAL))
):
    return [ClientResponse(**c.to_dict()) for c in store.list_clients(tenant.id)]


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(
        data: ClientCreate,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.PROFESSIONAL))
):
    """Create a client; the phone is unique within the tenant."""
    client = store.create_client(Client(
        tenant_id=tenant.id,
        name=data.name,
        phone=data.phone.strip(),
        email=data.email,
        birth_date=data.birth_date,
        notes=data.notes,
    ))
    logger.info(f"Client {client.id} created on tenant '{tenant.subdomain}'")
    return ClientResponse(**client.to_dict())
