# citaplanner/api/dashboard/services.py
"""
Service Catalog API Endpoints
Listing is public per tenant; maintenance is for tenant admins
"""
import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from citaplanner.api.dependencies import get_optional_user, get_store, get_tenant, require_roles
from citaplanner.core.exceptions import Forbidden, ResourceNotFound
from citaplanner.models import Service, Tenant, User, UserRole
from citaplanner.schemas.catalog import ServiceCreate, ServiceListResponse, ServiceResponse, ServiceUpdate
from citaplanner.storage.base import Store
from citaplanner.utils.identifiers import parse_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/services", tags=["Services"])


@router.get("", response_model=ServiceListResponse)
def list_services(
        include_inactive: bool = Query(False, description="Admins only"),
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: Optional[User] = Depends(get_optional_user)
):
    """Active services of the tenant, optionally with inactive ones for admins."""
    if include_inactive and (
            current_user is None or current_user.role not in (UserRole.ADMIN, UserRole.SUPERADMIN)):
        raise Forbidden("Only administrators can list inactive services")

    services = store.list_services(tenant.id, include_inactive=include_inactive)
    return ServiceListResponse(
        total=len(services),
        services=[ServiceResponse(**s.to_dict()) for s in services]
    )


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
        service_data: ServiceCreate,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(require_roles(UserRole.ADMIN))
):
    """Create a new service"""
    service = Service(
        tenant_id=tenant.id,
        name=service_data.name,
        description=service_data.description,
        category=service_data.category,
        price=Decimal(str(service_data.price)),
        duration=service_data.duration,
    )
    service = store.create_service(service)

    logger.info(f"Created service {service.id} for tenant '{tenant.subdomain}'")
    return ServiceResponse(**service.to_dict())


@router.put("/{service_id}", response_model=ServiceResponse)
def update_service(
        service_id: str,
        service_data: ServiceUpdate,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(require_roles(UserRole.ADMIN))
):
    """Update an existing service (status ACTIVE/INACTIVE included)"""
    service = store.get_service(tenant.id, parse_id(service_id, "Service"))
    if not service:
        raise ResourceNotFound("Service not found")

    update_data = service_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field == "price" and value is not None:
            value = Decimal(str(value))
        elif field == "status" and value is not None:
            value = value.value
        setattr(service, field, value)

    service = store.save_service(service)
    logger.info(f"Updated service {service.id}: {sorted(update_data)}")
    return ServiceResponse(**service.to_dict())
