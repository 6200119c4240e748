"""
Schemas for tenant provisioning by platform operators
"""
import re
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from citaplanner.models.tenant import TenantStatus, PlanType
from citaplanner.utils.time_utils import get_zone

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    subdomain: str
    plan_type: PlanType = PlanType.FREE
    feature_flags: Dict[str, bool] = Field(default_factory=dict)
    timezone: str = "UTC"

    # Initial administrator of the new tenant
    admin_name: str = Field(..., min_length=1, max_length=100)
    admin_phone: str = Field(..., min_length=1, max_length=20)
    admin_password: str = Field(..., min_length=8)

    @field_validator("subdomain")
    @classmethod
    def validate_subdomain(cls, v: str) -> str:
        v = v.strip().lower()
        if not SUBDOMAIN_PATTERN.match(v):
            raise ValueError("Subdomain must be a valid DNS label (a-z, 0-9, hyphen)")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        get_zone(v)
        return v


class TenantUpdate(BaseModel):
    """Subdomain is immutable; a subdomain field in the body is ignored.

    Omitted fields are left unchanged. An explicit null is rejected since
    every tenant column is required.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[TenantStatus] = None
    plan_type: Optional[PlanType] = None
    feature_flags: Optional[Dict[str, bool]] = None
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            get_zone(v)
        return v

    @model_validator(mode="after")
    def reject_nulls(self):
        for field in sorted(self.model_fields_set):
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class TenantResponse(BaseModel):
    id: str
    name: str
    subdomain: str
    status: str
    plan_type: str
    feature_flags: Dict[str, bool]
    timezone: Optional[str] = None
    created_at: Optional[str] = None
