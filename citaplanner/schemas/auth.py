"""
Pydantic schemas for login and the authenticated profile
"""
from typing import Dict, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request body for login. The tenant comes from the Host header."""
    phone: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "phone": "5512345678",
                "password": "SecurePass123!"
            }
        }


class UserProfile(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    name: str
    phone: str
    email: Optional[str] = None
    role: str
    related_id: Optional[str] = None
    notification_preferences: Dict[str, bool] = Field(default_factory=dict)


class TokenResponse(BaseModel):
    """Response with the signed access token and the user profile."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserProfile

    class Config:
        json_schema_extra = {
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "expires_in": 86400,
                "user": {
                    "id": "550e8400-e29b-41d4-a716-446655440000",
                    "tenant_id": "660e8400-e29b-41d4-a716-446655440001",
                    "name": "Ana López",
                    "phone": "5512345678",
                    "role": "ADMIN"
                }
            }
        }
