from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from tortoise.transactions import in_transaction

from makeeasy.crud.base import CRUD
from makeeasy.lifecycle import PaymentStatus
from makeeasy.models import Booking, Order, PaymentMethod
from makeeasy.schemas.order import OrderResponse


class OrderCRUD(CRUD[Order, OrderResponse]):  # type: ignore
    async def create_order(
        self,
        user_id: UUID,
        items: list[dict],
        total_amount: Decimal,
        shipping_address: dict | None,
        payment_method: PaymentMethod,
        service_bookings: list[dict],
    ) -> OrderResponse:
        """Persist the order and one booking per service line in one transaction."""
        async with in_transaction():
            inst = await Order.create(
                user_id=user_id,
                items=items,
                total_amount=total_amount,
                shipping_address=shipping_address,
                payment_method=payment_method,
            )
            for booking in service_bookings:
                await Booking.create(order_id=inst.id, user_id=user_id, **booking)
        return self.to_schema(inst)

    async def list_orders(self, user_id: UUID | None = None) -> list[OrderResponse]:
        if user_id is None:
            return await self.list_by(order_by="-created_at")
        return await self.list_by(user_id=user_id, order_by="-created_at")

    async def set_gateway_order(self, order_id: UUID, gateway_order_id: str) -> None:
        await Order.filter(id=order_id).update(gateway_order_id=gateway_order_id)

    async def mark_paid(
        self, order_id: UUID, payment_details: dict
    ) -> OrderResponse | None:
        """Complete the order's payment and cascade it to the order's bookings."""
        async with in_transaction():
            inst = await Order.get_or_none(id=order_id)
            if not inst:
                return None
            inst.payment_status = PaymentStatus.COMPLETED
            inst.payment_details = payment_details
            await inst.save()
            await Booking.filter(order_id=order_id).update(
                payment_status=PaymentStatus.COMPLETED
            )
        return self.to_schema(inst)

    async def update_order(self, order_id: UUID, **data) -> OrderResponse | None:
        async with in_transaction():
            updated = await self.update_by(order_id, **data)
            if updated and data.get("payment_status") == PaymentStatus.COMPLETED:
                await Booking.filter(order_id=order_id).update(
                    payment_status=PaymentStatus.COMPLETED
                )
        return updated


order_crud = OrderCRUD(Order, OrderResponse)
