"""
Schemas for booking and appointment management
"""
from datetime import datetime
from typing import Any, Dict, Optional, List

from pydantic import BaseModel, Field

from citaplanner.models.appointment import AppointmentStatus


class AppointmentCreate(BaseModel):
    """
    Booking request.

    Any tenant id a client sends is dropped (unknown fields are ignored);
    the tenant always comes from the Host header and the verified token.
    """
    professional_id: str
    service_id: str
    start_datetime: datetime = Field(..., description="Naive values are read in the tenant's time zone")
    client_name: str = Field(..., min_length=1, max_length=100)
    client_phone: str = Field(..., min_length=1, max_length=20)
    client_id: Optional[str] = None
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "professional_id": "8d5e2a8c-5b7f-4a8e-9a43-0d6f3c1b2a11",
                "service_id": "1f0c6a52-3e1d-4c1e-8a64-2f8b7d9e0c22",
                "start_datetime": "2025-03-17T09:30:00",
                "client_name": "María Pérez",
                "client_phone": "5511122233"
            }
        }


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    id: str
    tenant_id: str
    title: str
    description: Optional[str] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_id: Optional[str] = None
    professional_id: str
    service_id: str
    start_datetime: str
    end_datetime: str
    status: str


class AppointmentListResponse(BaseModel):
    total: int
    appointments: List[AppointmentResponse]


class IntegrationLogResponse(BaseModel):
    """One outbound notification dispatch for an appointment."""
    id: str
    tenant_id: str
    platform: str
    event_type: str
    status: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None
