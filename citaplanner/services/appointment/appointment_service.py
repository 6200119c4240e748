# ============================================================================
# citaplanner/services/appointment/appointment_service.py
# ============================================================================
"""Service for booking and managing appointments"""
import logging
from datetime import date, timedelta
from typing import List, Optional

from citaplanner.core.exceptions import (
    Forbidden,
    InvalidBooking,
    InvalidStatusTransition,
    ResourceNotFound,
    TenantUnavailable,
)
from citaplanner.models import Appointment, AppointmentStatus, Tenant, User, UserRole
from citaplanner.schemas.appointment import AppointmentCreate
from citaplanner.storage.base import Store
from citaplanner.utils.identifiers import parse_id, parse_optional_id
from citaplanner.utils.time_utils import day_bounds, ensure_utc, get_zone

logger = logging.getLogger(__name__)

# Only scheduled appointments change state, and only forward
ALLOWED_TRANSITIONS = {
    AppointmentStatus.SCHEDULED.value: {
        AppointmentStatus.COMPLETED.value,
        AppointmentStatus.CANCELLED.value,
    },
}


class AppointmentService:
    """Handles appointment operations"""

    @staticmethod
    def create_appointment(store: Store, tenant: Tenant, data: AppointmentCreate) -> Appointment:
        """
        Book an appointment for the tenant. The end time is derived from the
        service duration; the overlap check and insert happen atomically in
        the store, which raises SlotConflict when the interval is taken.
        """
        if not tenant.is_active:
            raise TenantUnavailable()

        professional = store.get_professional(tenant.id, parse_id(data.professional_id, "Professional"))
        if not professional:
            raise ResourceNotFound("Professional not found")

        service = store.get_service(tenant.id, parse_id(data.service_id, "Service"))
        if not service:
            raise ResourceNotFound("Service not found")
        if not service.is_active:
            raise InvalidBooking("Service is not available")
        if not professional.offers_service(service.id):
            raise InvalidBooking("Professional does not offer this service")

        client_id = parse_optional_id(data.client_id, "Client")
        if client_id and not store.get_client(tenant.id, client_id):
            raise ResourceNotFound("Client not found")

        start = ensure_utc(data.start_datetime, get_zone(tenant.timezone))
        end = start + timedelta(minutes=service.duration)

        appointment = Appointment(
            tenant_id=tenant.id,
            professional_id=professional.id,
            service_id=service.id,
            client_id=client_id,
            title=data.title or f"{service.name} - {data.client_name}",
            description=data.description,
            client_name=data.client_name,
            client_phone=data.client_phone,
            start_datetime=start,
            end_datetime=end,
            status=AppointmentStatus.SCHEDULED.value,
        )

        appointment = store.create_appointment_if_free(appointment)
        logger.info(
            f"Appointment {appointment.id} booked for professional {professional.id} "
            f"on tenant '{tenant.subdomain}' at {start.isoformat()}"
        )
        return appointment

    @staticmethod
    def update_status(
            store: Store,
            tenant: Tenant,
            appointment_id,
            new_status: str,
            user: Optional[User] = None
    ) -> Appointment:
        """SCHEDULED -> COMPLETED or CANCELLED. No re-validation of the interval."""
        appointment = store.get_appointment(tenant.id, parse_id(appointment_id, "Appointment"))
        if not appointment:
            raise ResourceNotFound("Appointment not found")

        new_status = AppointmentStatus(new_status).value
        if user is not None:
            AppointmentService._check_permission(user, appointment, new_status)

        if new_status not in ALLOWED_TRANSITIONS.get(appointment.status, set()):
            raise InvalidStatusTransition(
                f"Cannot change appointment from {appointment.status} to {new_status}"
            )

        appointment.status = new_status
        appointment = store.save_appointment(appointment)

        logger.info(f"Appointment {appointment.id} marked {new_status}")
        return appointment

    @staticmethod
    def _check_permission(user: User, appointment: Appointment, new_status: str) -> None:
        if user.role in (UserRole.ADMIN, UserRole.SUPERADMIN):
            return
        if user.role == UserRole.PROFESSIONAL and user.related_id == appointment.professional_id:
            return
        if (user.role == UserRole.CLIENT
                and new_status == AppointmentStatus.CANCELLED.value
                and AppointmentService._is_own_booking(user, appointment)):
            return
        raise Forbidden("You cannot modify this appointment")

    @staticmethod
    def _is_own_booking(user: User, appointment: Appointment) -> bool:
        if user.related_id is not None and appointment.client_id == user.related_id:
            return True
        return appointment.client_phone == user.phone

    @staticmethod
    def list_appointments(
            store: Store,
            tenant: Tenant,
            user: User,
            professional_id: Optional[str] = None,
            status: Optional[str] = None,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None
    ) -> List[Appointment]:
        """
        Tenant appointments visible to the user. Professionals only see their
        own agenda and clients only their own bookings.
        """
        tz = get_zone(tenant.timezone)
        filters = {
            "professional_id": parse_optional_id(professional_id, "Professional"),
            "statuses": [AppointmentStatus(status).value] if status else None,
            "start": day_bounds(start_date, tz)[0] if start_date else None,
            "end": day_bounds(end_date, tz)[1] if end_date else None,
        }

        if user.role == UserRole.PROFESSIONAL:
            if user.related_id is None:
                return []
            if filters["professional_id"] and filters["professional_id"] != user.related_id:
                return []
            filters["professional_id"] = user.related_id
        elif user.role == UserRole.CLIENT:
            filters["client_id"] = user.related_id
            filters["client_phone"] = user.phone

        return store.list_appointments(tenant.id, **filters)
