# ============================================================================
# FILE: citaplanner/storage/memory_store.py
# In-process Store used for local development, demos and tests
# ============================================================================
import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import inspect

from citaplanner.core.exceptions import DuplicateResource, SlotConflict
from citaplanner.models import (
    Appointment,
    BLOCKING_STATUSES,
    Client,
    IntegrationLog,
    Professional,
    Service,
    ServiceStatus,
    Tenant,
    User,
)
from citaplanner.storage.base import Store
from citaplanner.utils.time_utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def _apply_defaults(instance):
    """Fill column defaults the database would otherwise apply on insert."""
    for column in inspect(type(instance)).columns:
        if getattr(instance, column.key) is not None:
            continue
        if column.default is not None:
            if column.default.is_callable:
                setattr(instance, column.key, column.default.arg(None))
            elif column.default.is_scalar:
                setattr(instance, column.key, column.default.arg)
        elif column.server_default is not None and column.key in ("created_at", "updated_at"):
            setattr(instance, column.key, utc_now())
    return instance


def _touch(instance):
    if hasattr(instance, "updated_at"):
        instance.updated_at = utc_now()
    return instance


class MemoryStore(Store):
    """
    Dictionary-backed Store. All operations run under one re-entrant lock,
    which makes the appointment check-and-insert atomic.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.tenants: Dict[UUID, Tenant] = {}
        self.users: Dict[UUID, User] = {}
        self.professionals: Dict[UUID, Professional] = {}
        self.services: Dict[UUID, Service] = {}
        self.clients: Dict[UUID, Client] = {}
        self.appointments: Dict[UUID, Appointment] = {}
        self.integration_logs: List[IntegrationLog] = []

    # ------------------------------------------------------------------
    # Tenant directory
    # ------------------------------------------------------------------
    def get_tenant_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        with self._lock:
            for tenant in self.tenants.values():
                if tenant.subdomain == subdomain:
                    return tenant
        return None

    def get_tenant(self, tenant_id: UUID) -> Optional[Tenant]:
        with self._lock:
            return self.tenants.get(tenant_id)

    def list_tenants(self) -> List[Tenant]:
        with self._lock:
            return sorted(self.tenants.values(), key=lambda t: t.subdomain)

    def create_tenant(self, tenant: Tenant) -> Tenant:
        with self._lock:
            if self.get_tenant_by_subdomain(tenant.subdomain):
                raise DuplicateResource(f"Subdomain '{tenant.subdomain}' is already taken")
            _apply_defaults(tenant)
            self.tenants[tenant.id] = tenant
        return tenant

    def save_tenant(self, tenant: Tenant) -> Tenant:
        with self._lock:
            self.tenants[tenant.id] = _touch(tenant)
        return tenant

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def get_user(self, user_id: UUID) -> Optional[User]:
        with self._lock:
            return self.users.get(user_id)

    def get_user_by_login(self, tenant_id: Optional[UUID], phone: str) -> Optional[User]:
        with self._lock:
            for user in self.users.values():
                if user.phone == phone and user.tenant_id == tenant_id:
                    return user
        return None

    def create_user(self, user: User) -> User:
        with self._lock:
            if self.get_user_by_login(user.tenant_id, user.phone):
                raise DuplicateResource("A user with this phone already exists")
            _apply_defaults(user)
            self.users[user.id] = user
        return user

    def save_user(self, user: User) -> User:
        with self._lock:
            self.users[user.id] = user
        return user

    # ------------------------------------------------------------------
    # Professionals
    # ------------------------------------------------------------------
    def list_professionals(self, tenant_id: UUID) -> List[Professional]:
        with self._lock:
            found = [p for p in self.professionals.values() if p.tenant_id == tenant_id]
        return sorted(found, key=lambda p: p.name)

    def get_professional(self, tenant_id: UUID, professional_id: UUID) -> Optional[Professional]:
        with self._lock:
            professional = self.professionals.get(professional_id)
        if professional is None or professional.tenant_id != tenant_id:
            return None
        return professional

    def create_professional(self, professional: Professional) -> Professional:
        with self._lock:
            _apply_defaults(professional)
            self.professionals[professional.id] = professional
        return professional

    def save_professional(self, professional: Professional) -> Professional:
        with self._lock:
            self.professionals[professional.id] = _touch(professional)
        return professional

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------
    def list_services(self, tenant_id: UUID, include_inactive: bool = False) -> List[Service]:
        with self._lock:
            found = [
                s for s in self.services.values()
                if s.tenant_id == tenant_id and (include_inactive or s.status == ServiceStatus.ACTIVE.value)
            ]
        return sorted(found, key=lambda s: (s.category or "", s.name))

    def get_service(self, tenant_id: UUID, service_id: UUID) -> Optional[Service]:
        with self._lock:
            service = self.services.get(service_id)
        if service is None or service.tenant_id != tenant_id:
            return None
        return service

    def create_service(self, service: Service) -> Service:
        with self._lock:
            _apply_defaults(service)
            self.services[service.id] = service
        return service

    def save_service(self, service: Service) -> Service:
        with self._lock:
            self.services[service.id] = _touch(service)
        return service

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------
    def list_clients(self, tenant_id: UUID) -> List[Client]:
        with self._lock:
            found = [c for c in self.clients.values() if c.tenant_id == tenant_id]
        return sorted(found, key=lambda c: c.name)

    def get_client(self, tenant_id: UUID, client_id: UUID) -> Optional[Client]:
        with self._lock:
            client = self.clients.get(client_id)
        if client is None or client.tenant_id != tenant_id:
            return None
        return client

    def create_client(self, client: Client) -> Client:
        with self._lock:
            for existing in self.clients.values():
                if existing.tenant_id == client.tenant_id and existing.phone == client.phone:
                    raise DuplicateResource("A client with this phone already exists")
            _apply_defaults(client)
            self.clients[client.id] = client
        return client

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------
    def list_appointments(
            self,
            tenant_id: UUID,
            professional_id: Optional[UUID] = None,
            client_id: Optional[UUID] = None,
            client_phone: Optional[str] = None,
            statuses: Optional[Sequence[str]] = None,
            start: Optional[datetime] = None,
            end: Optional[datetime] = None,
    ) -> List[Appointment]:
        start = ensure_utc(start) if start else None
        end = ensure_utc(end) if end else None

        def matches(appointment: Appointment) -> bool:
            if appointment.tenant_id != tenant_id:
                return False
            if professional_id and appointment.professional_id != professional_id:
                return False
            if client_id or client_phone:
                by_id = client_id is not None and appointment.client_id == client_id
                by_phone = client_phone is not None and appointment.client_phone == client_phone
                if not (by_id or by_phone):
                    return False
            if statuses and appointment.status not in statuses:
                return False
            if end and ensure_utc(appointment.start_datetime) >= end:
                return False
            if start and ensure_utc(appointment.end_datetime) <= start:
                return False
            return True

        with self._lock:
            found = [a for a in self.appointments.values() if matches(a)]
        return sorted(found, key=lambda a: ensure_utc(a.start_datetime))

    def get_appointment(self, tenant_id: UUID, appointment_id: UUID) -> Optional[Appointment]:
        with self._lock:
            appointment = self.appointments.get(appointment_id)
        if appointment is None or appointment.tenant_id != tenant_id:
            return None
        return appointment

    def create_appointment_if_free(self, appointment: Appointment) -> Appointment:
        start = ensure_utc(appointment.start_datetime)
        end = ensure_utc(appointment.end_datetime)

        with self._lock:
            for existing in self.appointments.values():
                if (existing.tenant_id == appointment.tenant_id
                        and existing.professional_id == appointment.professional_id
                        and existing.status in BLOCKING_STATUSES
                        and existing.overlaps(start, end)):
                    logger.info(
                        f"Slot conflict for professional {appointment.professional_id}: "
                        f"{start.isoformat()} overlaps appointment {existing.id}"
                    )
                    raise SlotConflict(details={"conflicting_start": ensure_utc(existing.start_datetime).isoformat()})

            appointment.start_datetime = start
            appointment.end_datetime = end
            _apply_defaults(appointment)
            self.appointments[appointment.id] = appointment

        return appointment

    def save_appointment(self, appointment: Appointment) -> Appointment:
        with self._lock:
            self.appointments[appointment.id] = _touch(appointment)
        return appointment

    # ------------------------------------------------------------------
    # Integration log
    # ------------------------------------------------------------------
    def add_integration_log(self, log: IntegrationLog) -> IntegrationLog:
        with self._lock:
            _apply_defaults(log)
            self.integration_logs.append(log)
        return log

    def list_integration_logs(self, tenant_id: UUID, limit: int = 15) -> List[IntegrationLog]:
        with self._lock:
            found = [log for log in self.integration_logs if log.tenant_id == tenant_id]
        return list(reversed(found))[:limit]

    def ping(self) -> bool:
        return True
