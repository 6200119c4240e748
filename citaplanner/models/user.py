# ============================================================================
# FILE: citaplanner/models/user.py
# Tenant-scoped users; SUPERADMIN is the only tenant-less identity
# ============================================================================
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from passlib.context import CryptContext
import uuid
import enum

from citaplanner.models.base import Base

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """Roles a user can hold inside its tenant."""
    ADMIN = "ADMIN"
    PROFESSIONAL = "PROFESSIONAL"
    CLIENT = "CLIENT"
    SUPERADMIN = "SUPERADMIN"    # Platform operator, not bound to a tenant


DEFAULT_NOTIFICATION_PREFERENCES = {"whatsapp": True, "sms": False, "email": False}


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "phone", name="uq_users_tenant_phone"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=True, index=True)

    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False, index=True)  # login identifier
    email = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)

    role = Column(SQLEnum(UserRole), default=UserRole.CLIENT, nullable=False)

    # Professional.id or Client.id this login belongs to
    related_id = Column(UUID(as_uuid=True), nullable=True)

    notification_preferences = Column(JSON, default=lambda: dict(DEFAULT_NOTIFICATION_PREFERENCES))

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def verify_password(self, plain_password: str) -> bool:
        """Verify a plain password against the hashed password."""
        return pwd_context.verify(plain_password, self.hashed_password)

    @staticmethod
    def hash_password(plain_password: str) -> str:
        """Hash a plain password."""
        return pwd_context.hash(plain_password)

    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    def to_dict(self):
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id) if self.tenant_id else None,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "role": self.role.value if isinstance(self.role, UserRole) else self.role,
            "related_id": str(self.related_id) if self.related_id else None,
            "notification_preferences": dict(self.notification_preferences or {}),
        }

    def __repr__(self):
        return f"<User {self.phone} ({self.role})>"
