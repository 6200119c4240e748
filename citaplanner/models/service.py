# citaplanner/models/service.py
"""
Service Model - tenant-scoped catalog entry.
Duration drives slot generation and appointment end times.
"""
from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import enum
import uuid

from citaplanner.models.base import Base


class ServiceStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Service(Base):
    __tablename__ = "services"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id"),
        nullable=False,
        index=True
    )

    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)

    price = Column(Numeric(10, 2), nullable=False, default=0)

    # Duration in minutes, always positive
    duration = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=ServiceStatus.ACTIVE.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    @property
    def is_active(self) -> bool:
        return self.status == ServiceStatus.ACTIVE.value

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, tenant_id={self.tenant_id})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "price": float(self.price) if self.price is not None else None,
            "duration": self.duration,
            "formatted_duration": self.formatted_duration,
            "status": self.status,
        }

    @property
    def formatted_duration(self) -> str:
        """Return human-readable duration string"""
        hours = self.duration // 60
        minutes = self.duration % 60

        if hours > 0 and minutes > 0:
            return f"{hours}h {minutes}m"
        elif hours > 0:
            return f"{hours}h"
        else:
            return f"{minutes}m"
