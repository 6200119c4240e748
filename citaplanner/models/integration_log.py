# citaplanner/models/integration_log.py
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid

from citaplanner.models.base import Base


class IntegrationLog(Base):
    """Outbound notification/integration events, one row per channel dispatch"""
    __tablename__ = "integration_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)

    platform = Column(String(50), nullable=False)  # WHATSAPP, SMS, EMAIL
    event_type = Column(String(50), nullable=False)  # APPOINTMENT_CREATED, ...
    status = Column(String(20), nullable=False, default="QUEUED")
    payload = Column(JSON, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "platform": self.platform,
            "event_type": self.event_type,
            "status": self.status,
            "payload": self.payload,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
