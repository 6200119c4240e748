# ============================================================================
# FILE: citaplanner/api/public/auth.py
# Login and profile endpoints
# ============================================================================
import logging

from fastapi import APIRouter, Depends

from citaplanner.api.dependencies import (
    create_access_token,
    get_app_settings,
    get_current_user,
    get_store,
    get_tenant,
)
from citaplanner.config.settings import Settings
from citaplanner.core.exceptions import Unauthorized
from citaplanner.models import Tenant, User
from citaplanner.schemas.auth import LoginRequest, TokenResponse, UserProfile
from citaplanner.services.user.user_service import UserService
from citaplanner.storage.base import Store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
def login(
        credentials: LoginRequest,
        store: Store = Depends(get_store),
        tenant: Tenant = Depends(get_tenant),
        settings: Settings = Depends(get_app_settings)
):
    """
    Login with phone and password on the tenant named by the Host header.
    Returns a 24h access token and the user profile.
    """
    user = UserService.authenticate_user(
        store,
        tenant,
        credentials.phone,
        credentials.password,
        master_subdomain=settings.MASTER_SUBDOMAIN
    )

    if not user:
        raise Unauthorized("Invalid phone or password")

    access_token, expires_in = create_access_token(user, settings)
    logger.info(f"User {user.id} logged in on tenant '{tenant.subdomain}'")

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=UserProfile(**user.to_dict())
    )


@router.get("/me", response_model=UserProfile)
def get_me(current_user: User = Depends(get_current_user)):
    """Profile of the authenticated user."""
    return UserProfile(**current_user.to_dict())
