# ============================================================================
# FILE: citaplanner/services/user/user_service.py
# User logic - authentication and account creation, always tenant-scoped
# ============================================================================
import logging
from typing import Optional
from uuid import UUID

from citaplanner.models import Tenant, User, UserRole
from citaplanner.models.user import DEFAULT_NOTIFICATION_PREFERENCES, pwd_context
from citaplanner.storage.base import Store
from citaplanner.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user operations."""

    @staticmethod
    def create_user(
            store: Store,
            tenant_id: Optional[UUID],
            name: str,
            phone: str,
            password: str,
            role: UserRole = UserRole.CLIENT,
            email: Optional[str] = None,
            related_id: Optional[UUID] = None
    ) -> User:
        """
        Create a user with a bcrypt-hashed password.
        Raises DuplicateResource if the phone is already used in the tenant.
        """
        user = User(
            tenant_id=tenant_id,
            name=name.strip(),
            phone=phone.strip(),
            email=email,
            hashed_password=User.hash_password(password),
            role=role,
            related_id=related_id,
            notification_preferences=dict(DEFAULT_NOTIFICATION_PREFERENCES),
        )
        return store.create_user(user)

    @staticmethod
    def authenticate_user(
            store: Store,
            tenant: Tenant,
            phone: str,
            password: str,
            master_subdomain: str = "master"
    ) -> Optional[User]:
        """
        Authenticate by phone and password inside the resolved tenant.
        Returns None for an unknown phone and a wrong password alike.

        On the master tenant, platform identities (no tenant) may also log in.
        """
        phone = phone.strip()
        user = store.get_user_by_login(tenant.id, phone)

        if user is None and tenant.subdomain == master_subdomain:
            user = store.get_user_by_login(None, phone)
            if user is not None and not user.is_superadmin():
                user = None

        if user is None:
            # Spend the same hashing time as a real check
            pwd_context.dummy_verify()

        if user is None or not user.verify_password(password):
            logger.info(f"Failed login attempt on tenant '{tenant.subdomain}'")
            return None

        user.last_login_at = utc_now()
        store.save_user(user)

        return user
