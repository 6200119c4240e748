# ============================================================================
# FILE: citaplanner/api/dashboard/professionals.py
# Professionals and their schedules
# ============================================================================
"""
Schedules are validated in full before anything is written: an invalid
weekly schedule or exception returns 422 invalid_schedule and the stored
professional stays as it was.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from citaplanner.api.dependencies import get_current_user, get_store, get_tenant, require_roles
from citaplanner.core.exceptions import ResourceNotFound
from citaplanner.models import Professional, Tenant, User, UserRole
from citaplanner.schemas.professional import ProfessionalCreate, ProfessionalResponse, ProfessionalUpdate
from citaplanner.schemas.schedule import WeeklySchedule
from citaplanner.services.schedule.schedule_service import ScheduleService
from citaplanner.storage.base import Store
from citaplanner.utils.identifiers import parse_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/professionals", tags=["Professionals"])


def _validate_service_ids(store: Store, tenant: Tenant, service_ids: List[str]) -> List[str]:
    validated = []
    for raw in service_ids:
        service_id = parse_id(raw, "Service")
        if not store.get_service(tenant.id, service_id):
            raise ResourceNotFound(f"Service {raw} not found")
        validated.append(str(service_id))
    return validated


@router.get("", response_model=List[ProfessionalResponse])
def list_professionals(
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(get_current_user)
):
    """All professionals of the tenant with schedule and exceptions."""
    return [ProfessionalResponse(**p.to_dict()) for p in store.list_professionals(tenant.id)]


@router.post("", response_model=ProfessionalResponse, status_code=status.HTTP_201_CREATED)
def create_professional(
        data: ProfessionalCreate,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(require_roles(UserRole.ADMIN))
):
    """Create a professional. Without a schedule every day starts disabled."""
    professional = Professional(
        tenant_id=tenant.id,
        name=data.name,
        role_label=data.role_label,
        email=data.email,
        service_ids=_validate_service_ids(store, tenant, data.service_ids),
    )
    ScheduleService.apply(
        professional,
        data.weekly_schedule if data.weekly_schedule is not None else WeeklySchedule.closed(),
        data.exceptions,
        tenant.timezone
    )

    professional = store.create_professional(professional)
    logger.info(f"Professional {professional.id} created on tenant '{tenant.subdomain}'")
    return ProfessionalResponse(**professional.to_dict())


@router.put("/{professional_id}", response_model=ProfessionalResponse)
def update_professional(
        professional_id: str,
        data: ProfessionalUpdate,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(require_roles(UserRole.ADMIN))
):
    """Replace the weekly schedule and exceptions (and optionally profile fields)."""
    professional = store.get_professional(tenant.id, parse_id(professional_id, "Professional"))
    if not professional:
        raise ResourceNotFound("Professional not found")

    # Validate everything before touching the instance
    weekly = ScheduleService.parse_weekly_schedule(data.weekly_schedule)
    exceptions = ScheduleService.parse_exceptions(data.exceptions, tenant.timezone)
    service_ids = (
        _validate_service_ids(store, tenant, data.service_ids)
        if data.service_ids is not None else None
    )

    ScheduleService.apply(professional, weekly, exceptions, tenant.timezone)
    if data.name is not None:
        professional.name = data.name
    if data.role_label is not None:
        professional.role_label = data.role_label
    if data.email is not None:
        professional.email = data.email
    if service_ids is not None:
        professional.service_ids = service_ids

    professional = store.save_professional(professional)
    return ProfessionalResponse(**professional.to_dict())
