# ===== citaplanner/tasks/notification_tasks.py =====
import logging
from uuid import UUID

from citaplanner.config.celery_config import celery_app
from citaplanner.config.settings import get_settings
from citaplanner.core.exceptions import ResourceNotFound
from citaplanner.services.notification.notification_service import NotificationService
from citaplanner.storage.provider import build_store_provider

logger = logging.getLogger(__name__)

_store_provider = None


def get_store_provider():
    global _store_provider
    if _store_provider is None:
        _store_provider = build_store_provider(get_settings())
    return _store_provider


@celery_app.task(bind=True, max_retries=3)
def send_booking_notifications(self, tenant_id: str, appointment_id: str):
    """
    Record booking confirmations for every channel the client enabled

    Args:
        tenant_id: Tenant the appointment belongs to
        appointment_id: Newly created appointment
    """
    try:
        logger.info(f"Processing booking notifications for appointment {appointment_id}")

        with get_store_provider()() as store:
            logs = NotificationService.record_booking_notifications(
                store, UUID(tenant_id), UUID(appointment_id)
            )

        return {"status": "success", "appointment_id": appointment_id, "channels": [log.platform for log in logs]}

    except ResourceNotFound:
        logger.warning(f"Appointment {appointment_id} not found, skipping notifications")
        return {"status": "skipped", "appointment_id": appointment_id}

    except Exception as exc:
        logger.error(f"Failed to record notifications for appointment {appointment_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
