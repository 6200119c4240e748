# ============================================================================
# FILE: citaplanner/api/dashboard/appointments.py
# Appointment listing and status changes for authenticated users
# ============================================================================
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from citaplanner.api.dependencies import get_current_user, get_store, get_tenant
from citaplanner.models import AppointmentStatus, Tenant, User
from citaplanner.schemas.appointment import (
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentStatusUpdate,
)
from citaplanner.services.appointment.appointment_service import AppointmentService
from citaplanner.storage.base import Store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.get("", response_model=AppointmentListResponse)
def list_appointments(
        professional_id: Optional[str] = Query(None),
        status: Optional[AppointmentStatus] = Query(None),
        start_date: Optional[date] = Query(None, description="First day, tenant time zone"),
        end_date: Optional[date] = Query(None, description="Last day (inclusive), tenant time zone"),
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(get_current_user)
):
    """Appointments of the tenant visible to the current user, by start time."""
    appointments = AppointmentService.list_appointments(
        store,
        tenant,
        current_user,
        professional_id=professional_id,
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date
    )
    return AppointmentListResponse(
        total=len(appointments),
        appointments=[AppointmentResponse(**a.to_dict()) for a in appointments]
    )


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment_status(
        appointment_id: str,
        update: AppointmentStatusUpdate,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(get_current_user)
):
    """Change status only (SCHEDULED -> COMPLETED | CANCELLED)."""
    appointment = AppointmentService.update_status(
        store, tenant, appointment_id, update.status.value, user=current_user
    )
    return AppointmentResponse(**appointment.to_dict())


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(
        appointment_id: str,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(get_current_user)
):
    appointment = AppointmentService.update_status(
        store, tenant, appointment_id, AppointmentStatus.COMPLETED.value, user=current_user
    )
    return AppointmentResponse(**appointment.to_dict())


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
        appointment_id: str,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        current_user: User = Depends(get_current_user)
):
    appointment = AppointmentService.update_status(
        store, tenant, appointment_id, AppointmentStatus.CANCELLED.value, user=current_user
    )
    return AppointmentResponse(**appointment.to_dict())
