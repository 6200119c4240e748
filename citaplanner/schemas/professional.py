"""
Request/response schemas for professionals.

Schedules arrive as raw JSON and are validated by ScheduleService so that
bad schedule data surfaces as an invalid_schedule error instead of a generic
request validation failure.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProfessionalCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    role_label: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    service_ids: List[str] = Field(default_factory=list)
    weekly_schedule: Optional[List[Dict[str, Any]]] = None
    exceptions: List[Dict[str, Any]] = Field(default_factory=list)


class ProfessionalUpdate(BaseModel):
    """Replaces the schedule and exceptions; other fields are optional."""
    weekly_schedule: List[Dict[str, Any]]
    exceptions: List[Dict[str, Any]] = Field(default_factory=list)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role_label: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    service_ids: Optional[List[str]] = None


class ProfessionalResponse(BaseModel):
    id: str
    tenant_id: str
    name: str
    role_label: Optional[str] = None
    email: Optional[str] = None
    service_ids: List[str]
    weekly_schedule: List[Dict[str, Any]]
    exceptions: List[Dict[str, Any]]


class PublicProfessional(BaseModel):
    """What the public booking flow may see about a professional"""
    id: str
    name: str
    role_label: Optional[str] = None
    service_ids: List[str]


class AvailabilityResponse(BaseModel):
    professional_id: str
    service_id: str
    date: str
    duration_minutes: int
    timezone: str
    slots: List[str]
