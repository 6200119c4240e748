# citaplanner/models/tenant.py
"""
Tenant Model - one isolated business account, addressed by its subdomain.
Tenants are never deleted; status changes are soft.
"""
import enum
import uuid

from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from citaplanner.models.base import Base


class TenantStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"


class PlanType(str, enum.Enum):
    FREE = "FREE"
    PRO = "PRO"
    ELITE = "ELITE"


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)

    # Lowercase DNS label, unique and immutable after creation
    subdomain = Column(String(63), nullable=False, unique=True, index=True)

    status = Column(String(20), nullable=False, default=TenantStatus.ACTIVE.value)
    plan_type = Column(String(20), nullable=False, default=PlanType.FREE.value)
    feature_flags = Column(JSON, default=dict)

    # Operating time zone for schedules and exceptions
    timezone = Column(String(50), default="UTC")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE.value

    def has_feature(self, name: str, default: bool = False) -> bool:
        return bool((self.feature_flags or {}).get(name, default))

    def __repr__(self):
        return f"<Tenant(id={self.id}, subdomain={self.subdomain})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "subdomain": self.subdomain,
            "status": self.status,
            "plan_type": self.plan_type,
            "feature_flags": dict(self.feature_flags or {}),
            "timezone": self.timezone,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
