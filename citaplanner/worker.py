"""
Celery worker entry point
Consumes the notifications queue filled by the booking endpoint
"""
import logging
from celery.signals import worker_ready, worker_shutdown

from citaplanner.config.celery_config import celery_app
from citaplanner.config.settings import get_settings
from citaplanner.utils.my_logging import setup_logging

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    """Handle worker startup"""
    settings = get_settings()
    logger.info(f"Celery worker ready, storage backend: {settings.STORAGE_BACKEND}")
    logger.info(f"Registered tasks: {sorted(t for t in celery_app.tasks if t.startswith('citaplanner.'))}")

    if settings.use_memory_store:
        # The worker process has its own MemoryStore
        logger.warning("In-memory storage: notification logs written here are not visible to the API")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    """Handle worker shutdown"""
    logger.info("Celery worker shutting down...")


if __name__ == "__main__":
    celery_app.start([
        'worker',
        '--loglevel=info',
        '--queues=notifications',
        '--concurrency=4',
        '--max-tasks-per-child=1000'
    ])
