from __future__ import annotations

from uuid import UUID

from makeeasy.crud.base import CRUD
from makeeasy.lifecycle import BookingType, RentalStatus
from makeeasy.models import Booking, MonthlyBilling
from makeeasy.schemas.booking import (
    BillResponse,
    BookingResponse,
    RentalFilters,
    RentalResponse,
)


class BookingCRUD(CRUD[Booking, BookingResponse]):  # type: ignore
    async def list_bookings(self, user_id: UUID | None = None) -> list[BookingResponse]:
        if user_id is None:
            return await self.list_by(order_by="-created_at")
        return await self.list_by(user_id=user_id, order_by="-created_at")


class RentalCRUD(CRUD[Booking, RentalResponse]):  # type: ignore
    """Rental bookings, always returned with their product attached."""

    async def _load(self, inst: Booking) -> RentalResponse:
        await inst.fetch_related("product")
        return self.to_schema(inst)

    async def create_rental(self, **data) -> RentalResponse:
        inst = await Booking.create(**data)
        return await self._load(inst)

    async def get_rental(self, rental_id: UUID) -> RentalResponse | None:
        inst = await Booking.get_or_none(id=rental_id).prefetch_related("product")
        if not inst:
            return None
        return self.to_schema(inst)

    async def list_rentals(
        self, user_id: UUID, status: RentalStatus | None = None
    ) -> list[RentalResponse]:
        qs = Booking.filter(user_id=user_id, booking_type=BookingType.RENTAL)
        if status is not None:
            qs = qs.filter(rental_status=status)
        rentals = await qs.order_by("-created_at").prefetch_related("product")
        return [self.to_schema(r) for r in rentals]

    async def list_all_rentals(
        self, filters: RentalFilters
    ) -> tuple[list[RentalResponse], int]:
        qs = Booking.filter(booking_type=BookingType.RENTAL)
        if filters.status is not None:
            qs = qs.filter(rental_status=filters.status)
        if filters.city:
            qs = qs.filter(selected_city=filters.city)

        total = await qs.count()
        offset = (filters.page - 1) * filters.limit
        rentals = (
            await qs.order_by("-created_at")
            .offset(offset)
            .limit(filters.limit)
            .prefetch_related("product")
        )
        return [self.to_schema(r) for r in rentals], total

    async def update_rental(self, rental_id: UUID, **data) -> RentalResponse | None:
        inst = await Booking.get_or_none(id=rental_id)
        if not inst:
            return None
        inst.update_from_dict(data)
        await inst.save()
        return await self._load(inst)


class BillCRUD(CRUD[MonthlyBilling, BillResponse]):  # type: ignore
    async def list_for_booking(self, booking_id: UUID) -> list[BillResponse]:
        return await self.list_by(
            booking_id=booking_id, order_by=["-billing_year", "-billing_month"]
        )


booking_crud = BookingCRUD(Booking, BookingResponse)
rental_crud = RentalCRUD(Booking, RentalResponse)
bill_crud = BillCRUD(MonthlyBilling, BillResponse)
