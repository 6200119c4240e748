# ===== citaplanner/services/notification/notification_service.py =====
"""
Booking notifications.

Delivery to WhatsApp/SMS/email providers happens outside this service; here
each dispatch is recorded as an integration-log entry that the delivery side
consumes.
"""
import logging
from typing import List, Optional
from uuid import UUID

from citaplanner.core.exceptions import ResourceNotFound
from citaplanner.models import IntegrationLog
from citaplanner.models.user import DEFAULT_NOTIFICATION_PREFERENCES
from citaplanner.storage.base import Store

logger = logging.getLogger(__name__)

APPOINTMENT_CREATED = "APPOINTMENT_CREATED"

# Preference key -> platform label in the integration log
CHANNELS = {
    "whatsapp": "WHATSAPP",
    "sms": "SMS",
    "email": "EMAIL",
}


class NotificationService:

    @staticmethod
    def booking_preferences(store: Store, tenant_id: UUID, client_phone: Optional[str]) -> dict:
        """Preferences of the client's user account, or the defaults when they have none."""
        if client_phone:
            user = store.get_user_by_login(tenant_id, client_phone)
            if user and user.notification_preferences:
                return dict(user.notification_preferences)
        return dict(DEFAULT_NOTIFICATION_PREFERENCES)

    @staticmethod
    def record_booking_notifications(store: Store, tenant_id: UUID, appointment_id: UUID) -> List[IntegrationLog]:
        """One QUEUED entry per channel enabled for the booking client."""
        appointment = store.get_appointment(tenant_id, appointment_id)
        if not appointment:
            raise ResourceNotFound("Appointment not found")

        preferences = NotificationService.booking_preferences(store, tenant_id, appointment.client_phone)
        payload = {
            "appointment_id": str(appointment.id),
            "client_name": appointment.client_name,
            "client_phone": appointment.client_phone,
            "start_datetime": appointment.to_dict()["start_datetime"],
            "title": appointment.title,
        }

        logs = []
        for key, platform in CHANNELS.items():
            if not preferences.get(key):
                continue
            logs.append(store.add_integration_log(IntegrationLog(
                tenant_id=tenant_id,
                platform=platform,
                event_type=APPOINTMENT_CREATED,
                status="QUEUED",
                payload=payload,
            )))

        logger.info(
            f"Queued {len(logs)} notification(s) for appointment {appointment.id}: "
            f"{[log.platform for log in logs]}"
        )
        return logs
