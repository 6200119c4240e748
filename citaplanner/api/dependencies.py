# ============================================================================
# FILE: citaplanner/api/dependencies.py
# Request-scoped dependencies: settings, store, tenant and JWT authentication
# ============================================================================
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional, Tuple
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from citaplanner.config.settings import Settings
from citaplanner.core.exceptions import (
    Forbidden,
    SessionInvalid,
    TenantMismatch,
    TenantNotFound,
    Unauthorized,
)
from citaplanner.models import Tenant, User, UserRole
from citaplanner.storage.base import Store

logger = logging.getLogger(__name__)

# ============================================================================
# Security Schemes
# ============================================================================

# auto_error=False so a missing header surfaces as our own 401 body
jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token",
    auto_error=False
)


# ============================================================================
# Application State
# ============================================================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> Iterator[Store]:
    """One Store per request, closed when the response is done."""
    with request.app.state.store_provider() as store:
        yield store


def get_tenant(request: Request) -> Tenant:
    """Tenant attached by the tenant resolution middleware."""
    tenant = getattr(request.state, "tenant", None)
    if tenant is None:
        raise TenantNotFound()
    return tenant


# ============================================================================
# JWT Token Functions
# ============================================================================

def create_access_token(user: User, settings: Settings,
                        expires_delta: Optional[timedelta] = None) -> Tuple[str, int]:
    """
    Create a JWT access token for a user.

    Claims: sub (user id), role, tenant_id (None for SUPERADMIN), type,
    iat and exp.

    Returns:
        (encoded token, lifetime in seconds)
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    to_encode = {
        "sub": str(user.id),
        "role": role,
        "tenant_id": str(user.tenant_id) if user.tenant_id else None,
        "type": "access",
        "iat": now,
        "exp": now + expires_delta,
    }

    encoded_jwt = jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )

    return encoded_jwt, int(expires_delta.total_seconds())


def verify_access_token(token: str, settings: Settings) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        SessionInvalid: If the token is malformed, forged, expired or not an access token
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise SessionInvalid()

    if payload.get("type") != "access":
        raise SessionInvalid("Invalid token type")

    return payload


# ============================================================================
# JWT Authentication Dependencies
# ============================================================================

def get_current_user(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(jwt_security),
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        settings: Settings = Depends(get_app_settings)
) -> User:
    """
    Authenticated user for the resolved tenant.

    Raises:
        Unauthorized 401: no bearer token
        SessionInvalid 403: bad/expired token or unknown user
        TenantMismatch 403: token issued for a different tenant
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized()

    payload = verify_access_token(credentials.credentials, settings)

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise SessionInvalid()

    user = store.get_user(user_id)
    if user is None:
        raise SessionInvalid()

    token_tenant = payload.get("tenant_id")
    user_tenant = str(user.tenant_id) if user.tenant_id else None
    if token_tenant != user_tenant:
        raise SessionInvalid()

    # The platform identity carries no tenant and may act on any tenant
    if user.is_superadmin() and token_tenant is None:
        return user

    if token_tenant != str(tenant.id):
        logger.warning(
            f"SECURITY: tenant mismatch for user {user.id}: token tenant {token_tenant}, "
            f"host tenant {tenant.id} ('{tenant.subdomain}'), path {request.url.path}"
        )
        raise TenantMismatch()

    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory restricting a route to the given roles.
    SUPERADMIN always passes.

    Usage in routes:
        @router.put("/{professional_id}")
        def update(user: User = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    allowed = set(roles) | {UserRole.SUPERADMIN}

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise Forbidden()
        return current_user

    return dependency


def get_optional_user(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(jwt_security),
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        settings: Settings = Depends(get_app_settings)
) -> Optional[User]:
    """
    Optional JWT authentication for public routes that show more to staff.
    No token means anonymous; a bad token is still rejected.
    """
    if credentials is None:
        return None
    return get_current_user(request, credentials, store, tenant, settings)
