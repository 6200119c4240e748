# ============================================================================
# FILE: citaplanner/storage/sql_store.py
# SQLAlchemy implementation of the Store interface
# ============================================================================
import logging
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import or_, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

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
from citaplanner.utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)

# SQLSTATE raised by the appointments_no_overlap exclusion constraint
EXCLUSION_VIOLATION = "23P01"


class SQLStore(Store):
    """Store backed by one SQLAlchemy session (one per request)."""

    def __init__(self, db: Session):
        self.db = db

    def _add(self, instance, duplicate_message: Optional[str] = None):
        self.db.add(instance)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if duplicate_message:
                raise DuplicateResource(duplicate_message)
            raise
        self.db.refresh(instance)
        return instance

    def _save(self, instance):
        self.db.add(instance)
        self.db.commit()
        self.db.refresh(instance)
        return instance

    # ------------------------------------------------------------------
    # Tenant directory
    # ------------------------------------------------------------------
    def get_tenant_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        return self.db.query(Tenant).filter(Tenant.subdomain == subdomain).first()

    def get_tenant(self, tenant_id: UUID) -> Optional[Tenant]:
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def list_tenants(self) -> List[Tenant]:
        return self.db.query(Tenant).order_by(Tenant.subdomain.asc()).all()

    def create_tenant(self, tenant: Tenant) -> Tenant:
        return self._add(tenant, f"Subdomain '{tenant.subdomain}' is already taken")

    def save_tenant(self, tenant: Tenant) -> Tenant:
        return self._save(tenant)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def get_user(self, user_id: UUID) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_login(self, tenant_id: Optional[UUID], phone: str) -> Optional[User]:
        query = self.db.query(User).filter(User.phone == phone)
        if tenant_id is None:
            query = query.filter(User.tenant_id.is_(None))
        else:
            query = query.filter(User.tenant_id == tenant_id)
        return query.first()

    def create_user(self, user: User) -> User:
        if self.get_user_by_login(user.tenant_id, user.phone):
            raise DuplicateResource("A user with this phone already exists")
        return self._add(user, "A user with this phone already exists")

    def save_user(self, user: User) -> User:
        return self._save(user)

    # ------------------------------------------------------------------
    # Professionals
    # ------------------------------------------------------------------
    def list_professionals(self, tenant_id: UUID) -> List[Professional]:
        return self.db.query(Professional).filter(
            Professional.tenant_id == tenant_id
        ).order_by(Professional.name.asc()).all()

    def get_professional(self, tenant_id: UUID, professional_id: UUID) -> Optional[Professional]:
        return self.db.query(Professional).filter(
            Professional.id == professional_id,
            Professional.tenant_id == tenant_id
        ).first()

    def create_professional(self, professional: Professional) -> Professional:
        return self._add(professional)

    def save_professional(self, professional: Professional) -> Professional:
        return self._save(professional)

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------
    def list_services(self, tenant_id: UUID, include_inactive: bool = False) -> List[Service]:
        query = self.db.query(Service).filter(Service.tenant_id == tenant_id)
        if not include_inactive:
            query = query.filter(Service.status == ServiceStatus.ACTIVE.value)
        return query.order_by(Service.category.asc(), Service.name.asc()).all()

    def get_service(self, tenant_id: UUID, service_id: UUID) -> Optional[Service]:
        return self.db.query(Service).filter(
            Service.id == service_id,
            Service.tenant_id == tenant_id
        ).first()

    def create_service(self, service: Service) -> Service:
        return self._add(service)

    def save_service(self, service: Service) -> Service:
        return self._save(service)

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------
    def list_clients(self, tenant_id: UUID) -> List[Client]:
        return self.db.query(Client).filter(
            Client.tenant_id == tenant_id
        ).order_by(Client.name.asc()).all()

    def get_client(self, tenant_id: UUID, client_id: UUID) -> Optional[Client]:
        return self.db.query(Client).filter(
            Client.id == client_id,
            Client.tenant_id == tenant_id
        ).first()

    def create_client(self, client: Client) -> Client:
        existing = self.db.query(Client).filter(
            Client.tenant_id == client.tenant_id,
            Client.phone == client.phone
        ).first()
        if existing:
            raise DuplicateResource("A client with this phone already exists")
        return self._add(client, "A client with this phone already exists")

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
        query = self.db.query(Appointment).filter(Appointment.tenant_id == tenant_id)

        if professional_id:
            query = query.filter(Appointment.professional_id == professional_id)
        if client_id and client_phone:
            query = query.filter(or_(
                Appointment.client_id == client_id,
                Appointment.client_phone == client_phone
            ))
        elif client_id:
            query = query.filter(Appointment.client_id == client_id)
        elif client_phone:
            query = query.filter(Appointment.client_phone == client_phone)
        if statuses:
            query = query.filter(Appointment.status.in_(list(statuses)))
        if end:
            query = query.filter(Appointment.start_datetime < ensure_utc(end))
        if start:
            query = query.filter(Appointment.end_datetime > ensure_utc(start))

        return query.order_by(Appointment.start_datetime.asc()).all()

    def get_appointment(self, tenant_id: UUID, appointment_id: UUID) -> Optional[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.tenant_id == tenant_id
        ).first()

    def create_appointment_if_free(self, appointment: Appointment) -> Appointment:
        start = ensure_utc(appointment.start_datetime)
        end = ensure_utc(appointment.end_datetime)

        try:
            # Row lock on the professional serializes concurrent bookings for
            # them until this transaction ends; the exclusion constraint
            # backs it up at the storage level.
            self.db.query(Professional).filter(
                Professional.id == appointment.professional_id,
                Professional.tenant_id == appointment.tenant_id
            ).with_for_update().first()

            conflict = self.db.query(Appointment).filter(
                Appointment.tenant_id == appointment.tenant_id,
                Appointment.professional_id == appointment.professional_id,
                Appointment.status.in_(BLOCKING_STATUSES),
                Appointment.start_datetime < end,
                Appointment.end_datetime > start
            ).first()

            if conflict:
                self.db.rollback()
                logger.info(
                    f"Slot conflict for professional {appointment.professional_id}: "
                    f"{start.isoformat()} overlaps appointment {conflict.id}"
                )
                raise SlotConflict(details={"conflicting_start": ensure_utc(conflict.start_datetime).isoformat()})

            self.db.add(appointment)
            self.db.commit()

        except IntegrityError as e:
            self.db.rollback()
            if getattr(e.orig, "pgcode", None) == EXCLUSION_VIOLATION:
                logger.info(f"Exclusion constraint rejected booking for professional {appointment.professional_id}")
                raise SlotConflict()
            raise

        self.db.refresh(appointment)
        return appointment

    def save_appointment(self, appointment: Appointment) -> Appointment:
        return self._save(appointment)

    # ------------------------------------------------------------------
    # Integration log
    # ------------------------------------------------------------------
    def add_integration_log(self, log: IntegrationLog) -> IntegrationLog:
        return self._add(log)

    def list_integration_logs(self, tenant_id: UUID, limit: int = 15) -> List[IntegrationLog]:
        return self.db.query(IntegrationLog).filter(
            IntegrationLog.tenant_id == tenant_id
        ).order_by(IntegrationLog.created_at.desc()).limit(limit).all()

    def ping(self) -> bool:
        self.db.execute(text("SELECT 1"))
        return True
