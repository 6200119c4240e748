# ============================================================================
# FILE: citaplanner/services/tenant/tenant_service.py
# Tenant provisioning and soft status changes
# ============================================================================
import logging
from typing import Tuple

from citaplanner.core.exceptions import ResourceNotFound
from citaplanner.models import Tenant, User, UserRole
from citaplanner.schemas.tenant import TenantCreate, TenantUpdate
from citaplanner.services.user.user_service import UserService
from citaplanner.storage.base import Store
from citaplanner.utils.identifiers import parse_id

logger = logging.getLogger(__name__)


class TenantService:

    @staticmethod
    def provision(store: Store, data: TenantCreate) -> Tuple[Tenant, User]:
        """Create a tenant and its first ADMIN user."""
        tenant = store.create_tenant(Tenant(
            name=data.name,
            subdomain=data.subdomain,
            plan_type=data.plan_type.value,
            feature_flags=dict(data.feature_flags),
            timezone=data.timezone,
        ))

        admin = UserService.create_user(
            store,
            tenant_id=tenant.id,
            name=data.admin_name,
            phone=data.admin_phone,
            password=data.admin_password,
            role=UserRole.ADMIN,
        )

        logger.info(f"Provisioned tenant '{tenant.subdomain}' ({tenant.id}) with admin {admin.id}")
        return tenant, admin

    @staticmethod
    def update(store: Store, tenant_id, data: TenantUpdate) -> Tenant:
        """Apply status/plan/flag changes. Tenants are never deleted and never change subdomain."""
        tenant = store.get_tenant(parse_id(tenant_id, "Tenant"))
        if not tenant:
            raise ResourceNotFound("Tenant not found")

        changes = data.model_dump(exclude_unset=True, mode="json")
        for field, value in changes.items():
            setattr(tenant, field, value)

        tenant = store.save_tenant(tenant)
        logger.info(f"Tenant '{tenant.subdomain}' updated: {sorted(changes)}")
        return tenant
