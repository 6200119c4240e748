# ===== citaplanner/services/availability/availability_service.py =====
from typing import List, Optional
from datetime import date, datetime, timedelta
import logging

from citaplanner.core.exceptions import InvalidBooking, ResourceNotFound
from citaplanner.models import BLOCKING_STATUSES, Professional, Service, Tenant
from citaplanner.services.availability.slot_generator import generate_slots
from citaplanner.services.schedule.schedule_service import ScheduleService
from citaplanner.storage.base import Store
from citaplanner.utils.time_utils import day_bounds, ensure_utc, get_zone, local_datetime, utc_now

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Bookable start times for a professional, a service and a date"""

    @staticmethod
    def get_available_slots(
            store: Store,
            tenant: Tenant,
            professional_id,
            service_id,
            target_date: date,
            now: Optional[datetime] = None
    ) -> List[str]:
        """
        Schedule-derived slots, minus those colliding with a SCHEDULED or
        COMPLETED appointment, minus those already started when target_date
        is today in the tenant's time zone.
        """
        professional, service = AvailabilityService._load(store, tenant, professional_id, service_id)
        tz = get_zone(tenant.timezone)

        weekly, exceptions = ScheduleService.load(professional)
        candidates = generate_slots(target_date, weekly, exceptions, service.duration, tz)
        if not candidates:
            return []

        day_start, day_end = day_bounds(target_date, tz)
        booked = store.list_appointments(
            tenant.id,
            professional_id=professional.id,
            statuses=BLOCKING_STATUSES,
            start=day_start,
            end=day_end + timedelta(minutes=service.duration)
        )

        now = ensure_utc(now) if now else utc_now()
        duration = timedelta(minutes=service.duration)

        available = []
        for slot in candidates:
            start = local_datetime(target_date, slot, tz).astimezone(now.tzinfo)
            end = start + duration
            if start <= now:
                continue
            if any(appointment.overlaps(start, end) for appointment in booked):
                continue
            available.append(slot)

        logger.info(
            f"Availability for professional {professional.id} on {target_date}: "
            f"{len(available)}/{len(candidates)} slots free"
        )
        return available

    @staticmethod
    def _load(store: Store, tenant: Tenant, professional_id, service_id):
        professional: Professional = store.get_professional(tenant.id, professional_id)
        if not professional:
            raise ResourceNotFound("Professional not found")

        service: Service = store.get_service(tenant.id, service_id)
        if not service:
            raise ResourceNotFound("Service not found")
        if not service.is_active:
            raise InvalidBooking("Service is not available")
        if not professional.offers_service(service.id):
            raise InvalidBooking("Professional does not offer this service")

        return professional, service
