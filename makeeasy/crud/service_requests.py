from __future__ import annotations

from uuid import UUID

from tortoise.functions import Avg, Count
from tortoise.transactions import in_transaction

from makeeasy.crud.base import CRUD
from makeeasy.models import Booking, ServiceRequest
from makeeasy.schemas.service_request import (
    AdminServiceRequestFilters,
    ServiceRequestFilters,
    ServiceRequestResponse,
    ServiceRequestStats,
)


class ServiceRequestCRUD(CRUD[ServiceRequest, ServiceRequestResponse]):  # type: ignore
    async def create_request(self, booking_id: UUID, **data) -> ServiceRequestResponse:
        """Create the ticket and link it onto its booking."""
        async with in_transaction():
            inst = await ServiceRequest.create(booking_id=booking_id, **data)
            booking = await Booking.get(id=booking_id).select_for_update()
            booking.service_request_ids = [*booking.service_request_ids, str(inst.id)]
            await booking.save(update_fields=["service_request_ids", "updated_at"])
        return self.to_schema(inst)

    async def list_for_user(
        self, user_id: UUID, filters: ServiceRequestFilters
    ) -> list[ServiceRequestResponse]:
        qs = ServiceRequest.filter(user_id=user_id)
        if filters.status is not None:
            qs = qs.filter(status=filters.status)
        if filters.type is not None:
            qs = qs.filter(type=filters.type)
        return [self.to_schema(r) for r in await qs.order_by("-created_at")]

    async def list_all(
        self, filters: AdminServiceRequestFilters
    ) -> tuple[list[ServiceRequestResponse], int]:
        qs = ServiceRequest.all()
        if filters.status is not None:
            qs = qs.filter(status=filters.status)
        if filters.type is not None:
            qs = qs.filter(type=filters.type)
        if filters.priority is not None:
            qs = qs.filter(priority=filters.priority)

        total = await qs.count()
        offset = (filters.page - 1) * filters.limit
        requests = await qs.order_by("-created_at").offset(offset).limit(filters.limit)
        return [self.to_schema(r) for r in requests], total

    async def _counts(self, field: str) -> dict[str, int]:
        rows = (
            await ServiceRequest.all()
            .annotate(count=Count("id"))
            .group_by(field)
            .values(field, "count")
        )
        return {str(row[field]): row["count"] for row in rows}

    async def stats(self) -> ServiceRequestStats:
        rated = await (
            ServiceRequest.filter(rating__isnull=False)
            .annotate(avg=Avg("rating"), n=Count("id"))
            .first()
            .values("avg", "n")
        )
        return ServiceRequestStats(
            by_status=await self._counts("status"),
            by_type=await self._counts("type"),
            by_priority=await self._counts("priority"),
            average_rating=round(float(rated["avg"] or 0), 2) if rated else 0.0,
            total_rated=rated["n"] if rated else 0,
        )


service_request_crud = ServiceRequestCRUD(ServiceRequest, ServiceRequestResponse)
