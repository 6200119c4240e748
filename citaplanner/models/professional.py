# citaplanner/models/professional.py
"""
Professional Model - a schedulable staff member of one tenant.

weekly_schedule is stored as a JSON array of exactly 7 day entries and
exceptions as a JSON array of independent objects; both are read and
written together with the row.
"""
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid

from citaplanner.models.base import Base


class Professional(Base):
    __tablename__ = "professionals"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id"),
        nullable=False,
        index=True
    )

    name = Column(String(100), nullable=False)
    role_label = Column(String(100), nullable=True)  # e.g. "Stylist", "Lash artist"
    email = Column(String(255), nullable=True)

    service_ids = Column(JSON, default=list)
    weekly_schedule = Column(JSON, nullable=False)
    exceptions = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def offers_service(self, service_id: str) -> bool:
        """An empty service list means the professional performs every service."""
        ids = self.service_ids or []
        return not ids or str(service_id) in [str(i) for i in ids]

    def __repr__(self):
        return f"<Professional(id={self.id}, name={self.name}, tenant_id={self.tenant_id})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "name": self.name,
            "role_label": self.role_label,
            "email": self.email,
            "service_ids": [str(i) for i in (self.service_ids or [])],
            "weekly_schedule": self.weekly_schedule,
            "exceptions": self.exceptions or [],
        }
