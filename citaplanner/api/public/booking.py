# ============================================================================
# FILE: citaplanner/api/public/booking.py
# Public booking flow: who offers a service, when, and booking it
# ============================================================================
import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, status

from citaplanner.api.dependencies import get_app_settings, get_store, get_tenant
from citaplanner.config.settings import Settings
from citaplanner.core.exceptions import ResourceNotFound
from citaplanner.models import Tenant
from citaplanner.schemas.appointment import AppointmentCreate, AppointmentResponse
from citaplanner.schemas.professional import AvailabilityResponse, PublicProfessional
from citaplanner.services.appointment.appointment_service import AppointmentService
from citaplanner.services.availability.availability_service import AvailabilityService
from citaplanner.storage.base import Store
from citaplanner.utils.identifiers import parse_id

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Booking"])


@router.get("/booking/professionals", response_model=List[PublicProfessional])
def list_bookable_professionals(
        service_id: str = Query(..., description="Service to book"),
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant)
):
    """Professionals of this tenant who offer the service."""
    service = store.get_service(tenant.id, parse_id(service_id, "Service"))
    if not service or not service.is_active:
        raise ResourceNotFound("Service not found")

    return [
        PublicProfessional(
            id=str(p.id),
            name=p.name,
            role_label=p.role_label,
            service_ids=[str(i) for i in (p.service_ids or [])]
        )
        for p in store.list_professionals(tenant.id)
        if p.offers_service(service.id)
    ]


@router.get("/professionals/{professional_id}/availability", response_model=AvailabilityResponse)
def get_availability(
        professional_id: str,
        target_date: date = Query(..., alias="date", description="Calendar day in the tenant's time zone (YYYY-MM-DD)"),
        service_id: str = Query(...),
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant)
):
    """Start times still bookable for the service on that day."""
    slots = AvailabilityService.get_available_slots(
        store,
        tenant,
        parse_id(professional_id, "Professional"),
        parse_id(service_id, "Service"),
        target_date
    )
    service = store.get_service(tenant.id, parse_id(service_id, "Service"))

    return AvailabilityResponse(
        professional_id=professional_id,
        service_id=service_id,
        date=target_date.isoformat(),
        duration_minutes=service.duration,
        timezone=tenant.timezone or "UTC",
        slots=slots
    )


@router.post("/appointments", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(
        booking: AppointmentCreate,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        settings: Settings = Depends(get_app_settings)
):
    """
    Book an appointment. The tenant always comes from the Host header;
    a conflicting booking returns 409 slot_conflict.
    """
    appointment = AppointmentService.create_appointment(store, tenant, booking)

    # Tenants opt out with feature_flags {"booking_notifications": false}
    if settings.NOTIFICATIONS_ENABLED and tenant.has_feature("booking_notifications", default=True):
        _queue_notifications(str(tenant.id), str(appointment.id))

    return AppointmentResponse(**appointment.to_dict())


def _queue_notifications(tenant_id: str, appointment_id: str) -> None:
    from citaplanner.tasks.notification_tasks import send_booking_notifications

    try:
        send_booking_notifications.delay(tenant_id, appointment_id)
    except Exception as e:
        # The booking is committed; a broker outage only delays confirmations
        logger.error(f"Could not queue notifications for appointment {appointment_id}: {e}")
