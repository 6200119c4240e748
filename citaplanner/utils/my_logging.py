# citaplanner/utils/my_logging.py
"""Logging configuration with per-request tenant and correlation context"""
import logging
import sys
from contextvars import ContextVar
from typing import Optional

from citaplanner.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(tenant)s %(correlation_id)s] %(message)s"
NO_CONTEXT = "-"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default=NO_CONTEXT)
_tenant: ContextVar[str] = ContextVar("tenant", default=NO_CONTEXT)

# Libraries whose INFO output drowns the booking flow when not debugging
NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "celery",
    "kombu",
    "redis",
    "httpx",
    "uvicorn.access",
)


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def set_tenant(subdomain: Optional[str]) -> None:
    _tenant.set(subdomain or NO_CONTEXT)


class RequestContextFilter(logging.Filter):
    """Stamps tenant and correlation_id on records that don't carry them as extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "tenant"):
            record.tenant = _tenant.get()
        if not hasattr(record, "correlation_id"):
            record.correlation_id = _correlation_id.get()
        return True


def setup_logging(verbose: bool = True, settings: Optional[Settings] = None):
    """
    Configure application logging.

    Third-party loggers are held at WARNING unless DEBUG is on, and at
    ERROR when not verbose.
    """
    settings = settings or get_settings()

    if verbose:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    else:
        level = logging.WARNING

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler])

    if not verbose or not settings.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.ERROR if not verbose else logging.WARNING)
