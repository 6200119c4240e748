"""
Schemas for the tenant catalog: services and client records
"""
from datetime import date
from typing import Optional, List

from pydantic import BaseModel, Field

from citaplanner.models.service import ServiceStatus


class ServiceCreate(BaseModel):
    """Request model for creating a service"""
    name: str = Field(..., min_length=1, max_length=100)
    duration: int = Field(..., gt=0, description="Duration in minutes")
    price: float = Field(0, ge=0)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)


class ServiceUpdate(BaseModel):
    """Request model for updating a service"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    duration: Optional[int] = Field(None, gt=0)
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    status: Optional[ServiceStatus] = None


class ServiceResponse(BaseModel):
    id: str
    tenant_id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    duration: int
    formatted_duration: str
    status: str


class ServiceListResponse(BaseModel):
    total: int
    services: List[ServiceResponse]


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    notes: Optional[str] = None


class ClientResponse(BaseModel):
    id: str
    tenant_id: str
    name: str
    phone: str
    email: Optional[str] = None
    birth_date: Optional[str] = None
    notes: Optional[str] = None
