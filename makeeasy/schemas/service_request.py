from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from makeeasy.lifecycle import ServiceRequestStatus, TimeSlot
from makeeasy.models import Priority, ServiceRequestType


class ServiceRequestResponse(BaseModel):
    id: UUID
    user_id: UUID
    booking_id: UUID
    product_id: UUID
    type: ServiceRequestType
    title: str
    description: str
    images: list[str] = Field(default_factory=list)
    priority: Priority
    status: ServiceRequestStatus
    assigned_to_id: UUID | None = None
    assigned_at: datetime | None = None
    scheduled_date: datetime | None = None
    scheduled_time_slot: TimeSlot | None = None
    resolution: str | None = None
    resolved_at: datetime | None = None
    closed_at: datetime | None = None
    rating: int | None = None
    feedback: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ServiceRequestFilters(BaseModel):
    status: ServiceRequestStatus | None = None
    type: ServiceRequestType | None = None


class AdminServiceRequestFilters(ServiceRequestFilters):
    priority: Priority | None = None

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class AssignRequest(BaseModel):
    assigned_to: UUID | None = None


class ScheduleVisit(BaseModel):
    # optional here so missing values surface as 400 from the router
    scheduled_date: datetime | None = None
    scheduled_time_slot: TimeSlot | None = None


class ResolveRequest(BaseModel):
    resolution: str | None = None


class RateRequest(BaseModel):
    rating: int | None = None
    feedback: str | None = Field(default=None, max_length=1000)


class ServiceRequestStats(BaseModel):
    by_status: dict[str, int]
    by_type: dict[str, int]
    by_priority: dict[str, int]
    average_rating: float
    total_rated: int
