# citaplanner/models/appointment.py
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from citaplanner.models.base import Base
from citaplanner.utils.time_utils import ensure_utc


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Statuses that occupy the professional's time
BLOCKING_STATUSES = (AppointmentStatus.SCHEDULED.value, AppointmentStatus.COMPLETED.value)


class Appointment(Base):
    """
    A committed booking.

    Non-overlap per (tenant, professional) is enforced by the
    appointments_no_overlap exclusion constraint created in the migration.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_tenant_professional_start", "tenant_id", "professional_id", "start_datetime"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=False)
    professional_id = Column(UUID(as_uuid=True), ForeignKey("professionals.id"), nullable=False)
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    # Customer info
    client_name = Column(String(100), nullable=True)
    client_phone = Column(String(20), nullable=True)

    # Stored in UTC
    start_datetime = Column(DateTime(timezone=True), nullable=False)
    end_datetime = Column(DateTime(timezone=True), nullable=False)

    status = Column(String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES

    def overlaps(self, start, end) -> bool:
        return ensure_utc(self.start_datetime) < end and start < ensure_utc(self.end_datetime)

    def __repr__(self):
        return f"<Appointment(id={self.id}, professional_id={self.professional_id}, status={self.status})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "title": self.title,
            "description": self.description,
            "client_name": self.client_name,
            "client_phone": self.client_phone,
            "client_id": str(self.client_id) if self.client_id else None,
            "professional_id": str(self.professional_id),
            "service_id": str(self.service_id),
            "start_datetime": ensure_utc(self.start_datetime).isoformat(),
            "end_datetime": ensure_utc(self.end_datetime).isoformat(),
            "status": self.status,
        }
