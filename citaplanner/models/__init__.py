# citaplanner/models/__init__.py
from .base import Base
from .tenant import Tenant, TenantStatus, PlanType
from .user import User, UserRole
from .professional import Professional
from .service import Service, ServiceStatus
from .client import Client
from .appointment import Appointment, AppointmentStatus, BLOCKING_STATUSES
from .integration_log import IntegrationLog

__all__ = [
    "Base",
    "Tenant",
    "TenantStatus",
    "PlanType",
    "User",
    "UserRole",
    "Professional",
    "Service",
    "ServiceStatus",
    "Client",
    "Appointment",
    "AppointmentStatus",
    "BLOCKING_STATUSES",
    "IntegrationLog",
]
