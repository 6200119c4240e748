# ============================================================================
# FILE: citaplanner/storage/base.py
# Storage interface shared by the SQL and in-memory backends
# ============================================================================
"""
Every method that touches tenant data takes the tenant id explicitly and
filters by it; callers pass the tenant resolved from the Host header (or the
verified token), never a value read from a request body.
"""
import abc
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from citaplanner.models import (
    Appointment,
    Client,
    IntegrationLog,
    Professional,
    Service,
    Tenant,
    User,
)


class Store(abc.ABC):
    """Persistence operations used by the services and the tenant resolver."""

    # ------------------------------------------------------------------
    # Tenant directory
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def get_tenant_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        ...

    @abc.abstractmethod
    def get_tenant(self, tenant_id: UUID) -> Optional[Tenant]:
        ...

    @abc.abstractmethod
    def list_tenants(self) -> List[Tenant]:
        ...

    @abc.abstractmethod
    def create_tenant(self, tenant: Tenant) -> Tenant:
        """Raises DuplicateResource when the subdomain is taken."""

    @abc.abstractmethod
    def save_tenant(self, tenant: Tenant) -> Tenant:
        ...

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def get_user(self, user_id: UUID) -> Optional[User]:
        ...

    @abc.abstractmethod
    def get_user_by_login(self, tenant_id: Optional[UUID], phone: str) -> Optional[User]:
        """tenant_id=None looks up tenant-less (platform) identities only."""

    @abc.abstractmethod
    def create_user(self, user: User) -> User:
        """Raises DuplicateResource when (tenant, phone) already exists."""

    @abc.abstractmethod
    def save_user(self, user: User) -> User:
        ...

    # ------------------------------------------------------------------
    # Professionals
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def list_professionals(self, tenant_id: UUID) -> List[Professional]:
        ...

    @abc.abstractmethod
    def get_professional(self, tenant_id: UUID, professional_id: UUID) -> Optional[Professional]:
        ...

    @abc.abstractmethod
    def create_professional(self, professional: Professional) -> Professional:
        ...

    @abc.abstractmethod
    def save_professional(self, professional: Professional) -> Professional:
        ...

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def list_services(self, tenant_id: UUID, include_inactive: bool = False) -> List[Service]:
        ...

    @abc.abstractmethod
    def get_service(self, tenant_id: UUID, service_id: UUID) -> Optional[Service]:
        ...

    @abc.abstractmethod
    def create_service(self, service: Service) -> Service:
        ...

    @abc.abstractmethod
    def save_service(self, service: Service) -> Service:
        ...

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def list_clients(self, tenant_id: UUID) -> List[Client]:
        ...

    @abc.abstractmethod
    def get_client(self, tenant_id: UUID, client_id: UUID) -> Optional[Client]:
        ...

    @abc.abstractmethod
    def create_client(self, client: Client) -> Client:
        """Raises DuplicateResource when (tenant, phone) already exists."""

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------
    @abc.abstractmethod
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
        """
        Appointments ordered by start time.

        start/end select appointments overlapping [start, end). When both
        client_id and client_phone are given, either one matching is enough.
        """

    @abc.abstractmethod
    def get_appointment(self, tenant_id: UUID, appointment_id: UUID) -> Optional[Appointment]:
        ...

    @abc.abstractmethod
    def create_appointment_if_free(self, appointment: Appointment) -> Appointment:
        """
        Atomically check for an overlapping SCHEDULED/COMPLETED appointment of
        the same tenant and professional and insert. Raises SlotConflict.
        """

    @abc.abstractmethod
    def save_appointment(self, appointment: Appointment) -> Appointment:
        ...

    # ------------------------------------------------------------------
    # Integration log
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def add_integration_log(self, log: IntegrationLog) -> IntegrationLog:
        ...

    @abc.abstractmethod
    def list_integration_logs(self, tenant_id: UUID, limit: int = 15) -> List[IntegrationLog]:
        ...

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def ping(self) -> bool:
        ...
