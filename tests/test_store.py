"""
Model hooks and CRUD queries run against an in-memory SQLite store.

Each test builds its rows inside `in_store()`, which opens a fresh database,
runs the scenario and closes the connection again.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from uuid import uuid4

import pytest
from tortoise import Tortoise
from tortoise.exceptions import ValidationError

from makeeasy.crud.kyc import kyc_crud
from makeeasy.crud.orders import order_crud
from makeeasy.crud.service_requests import service_request_crud
from makeeasy.lifecycle import BookingType, PaymentStatus
from makeeasy.models import (
    KYC,
    Booking,
    Cart,
    KycStatus,
    MonthlyBilling,
    Order,
    OrderStatus,
    PaymentMethod,
    Product,
    Service,
    ServiceRequestType,
    User,
)

from .factories import LATER, NOW


def in_store(scenario):
    async def _run():
        await Tortoise.init(
            db_url="sqlite://:memory:",
            modules={"models": ["makeeasy.models"]},
            use_tz=True,
        )
        await Tortoise.generate_schemas()
        try:
            await scenario()
        finally:
            await Tortoise.close_connections()

    asyncio.run(_run())


async def make_user(**overrides) -> User:
    data = dict(
        name="Test Customer",
        email=f"user{uuid4().hex[:8]}@makeeasy.com",
        password_hash="x",
    )
    return await User.create(**{**data, **overrides})


async def make_product() -> Product:
    return await Product.create(
        title="Double Door Fridge",
        price=Decimal("1000"),
        location="Kanpur",
        category="/appliances",
    )


async def make_service() -> Service:
    return await Service.create(
        title="AC Service",
        description="Full AC servicing",
        icon="Wind",
        price=Decimal("499"),
    )


def booking_fields(**overrides) -> dict:
    data = dict(
        start_date=NOW,
        end_date=LATER,
        total_amount=Decimal("499"),
        customer_name="Test Customer",
        customer_email="user@makeeasy.com",
        customer_phone="9876543210",
    )
    return {**data, **overrides}


def proofs() -> dict:
    return dict(
        id_proof={"type": "aadhaar", "number": "1234", "verified": False},
        address_proof={"type": "utility_bill", "verified": False},
        current_address={"address_line1": "12 Civil Lines", "city": "Kanpur"},
        submitted_at=NOW,
    )


# ---------------------------------------------------------------------------
# Booking references
# ---------------------------------------------------------------------------


class TestBookingReference:
    def test_product_booking_is_a_rental(self):
        async def scenario():
            user = await make_user()
            product = await make_product()
            booking = await Booking.create(
                user=user, product=product, **booking_fields()
            )
            stored = await Booking.get(id=booking.id)
            assert stored.booking_type == BookingType.RENTAL

        in_store(scenario)

    def test_service_booking_is_a_service(self):
        async def scenario():
            user = await make_user()
            service = await make_service()
            booking = await Booking.create(
                user=user, service=service, **booking_fields()
            )
            assert booking.booking_type == BookingType.SERVICE

        in_store(scenario)

    def test_both_references_rejected(self):
        async def scenario():
            user = await make_user()
            product = await make_product()
            service = await make_service()
            with pytest.raises(ValidationError, match="both product and service"):
                await Booking.create(
                    user=user, product=product, service=service, **booking_fields()
                )
            assert await Booking.all().count() == 0

        in_store(scenario)

    def test_no_reference_rejected(self):
        async def scenario():
            user = await make_user()
            with pytest.raises(ValidationError, match="Either product or service"):
                await Booking.create(user=user, **booking_fields())

        in_store(scenario)

    def test_booking_type_from_client_is_overridden(self):
        async def scenario():
            user = await make_user()
            product = await make_product()
            booking = await Booking.create(
                user=user,
                product=product,
                booking_type=BookingType.SERVICE,
                **booking_fields(),
            )
            assert booking.booking_type == BookingType.RENTAL

        in_store(scenario)


# ---------------------------------------------------------------------------
# Computed totals
# ---------------------------------------------------------------------------


class TestTotals:
    def test_cart_total_follows_items(self):
        async def scenario():
            user = await make_user()
            cart = await Cart.create(
                user=user,
                items=[
                    {"price": "250.50", "quantity": 2},
                    {"price": "100", "quantity": 1},
                ],
            )
            assert (await Cart.get(id=cart.id)).total_amount == Decimal("601.00")

            cart.items = []
            await cart.save()
            assert (await Cart.get(id=cart.id)).total_amount == Decimal("0")

        in_store(scenario)

    def test_monthly_bill_totals(self):
        async def scenario():
            user = await make_user()
            product = await make_product()
            booking = await Booking.create(
                user=user, product=product, **booking_fields()
            )
            bill = await MonthlyBilling.create(
                user=user,
                booking=booking,
                product=product,
                billing_month=7,
                billing_year=2026,
                rental_amount=Decimal("1000"),
                add_ons=[{"name": "Stabilizer", "charge": "80"}],
                late_fee=Decimal("25"),
                due_date=LATER,
            )
            stored = await MonthlyBilling.get(id=bill.id)
            assert stored.add_on_total == Decimal("80")
            assert stored.gst == Decimal("194.40")
            assert stored.total_amount == Decimal("1299.40")

        in_store(scenario)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class TestOrderPayment:
    async def _order_with_bookings(self):
        user = await make_user()
        service = await make_service()
        order = await order_crud.create_order(
            user_id=user.id,
            items=[{"service_id": str(service.id), "quantity": 2, "price": "499"}],
            total_amount=Decimal("998"),
            shipping_address=None,
            payment_method=PaymentMethod.CARD,
            service_bookings=[
                booking_fields(service_id=service.id),
                booking_fields(service_id=service.id),
            ],
        )
        return order

    def test_create_order_persists_service_bookings(self):
        async def scenario():
            order = await self._order_with_bookings()
            assert order.payment_status == PaymentStatus.PENDING
            bookings = await Booking.filter(order_id=order.id)
            assert len(bookings) == 2
            assert {b.booking_type for b in bookings} == {BookingType.SERVICE}

        in_store(scenario)

    def test_mark_paid_cascades_to_bookings(self):
        async def scenario():
            order = await self._order_with_bookings()
            paid = await order_crud.mark_paid(order.id, {"payment_id": "pay_1"})
            assert paid.payment_status == PaymentStatus.COMPLETED
            assert paid.payment_details == {"payment_id": "pay_1"}
            statuses = await Booking.filter(order_id=order.id).values_list(
                "payment_status", flat=True
            )
            assert set(statuses) == {PaymentStatus.COMPLETED}

        in_store(scenario)

    def test_mark_paid_unknown_order(self):
        async def scenario():
            assert await order_crud.mark_paid(uuid4(), {}) is None

        in_store(scenario)

    def test_update_order_cascades_completed_payment(self):
        async def scenario():
            order = await self._order_with_bookings()
            await order_crud.update_order(
                order.id, payment_status=PaymentStatus.COMPLETED
            )
            statuses = await Booking.filter(order_id=order.id).values_list(
                "payment_status", flat=True
            )
            assert set(statuses) == {PaymentStatus.COMPLETED}

        in_store(scenario)

    def test_update_order_without_payment_leaves_bookings(self):
        async def scenario():
            order = await self._order_with_bookings()
            updated = await order_crud.update_order(
                order.id, order_status=OrderStatus.CANCELLED
            )
            assert updated.order_status == OrderStatus.CANCELLED
            assert (await Order.get(id=order.id)).order_status == "cancelled"
            statuses = await Booking.filter(order_id=order.id).values_list(
                "payment_status", flat=True
            )
            assert set(statuses) == {PaymentStatus.PENDING}

        in_store(scenario)


# ---------------------------------------------------------------------------
# Service requests
# ---------------------------------------------------------------------------


class TestServiceRequestLink:
    def test_new_requests_are_linked_onto_the_booking(self):
        async def scenario():
            user = await make_user()
            product = await make_product()
            booking = await Booking.create(
                user=user, product=product, **booking_fields()
            )
            created = []
            for title in ("Not cooling", "Door seal loose"):
                created.append(
                    await service_request_crud.create_request(
                        booking_id=booking.id,
                        user_id=user.id,
                        product_id=product.id,
                        type=ServiceRequestType.REPAIR,
                        title=title,
                        description="Needs a technician",
                        images=[],
                    )
                )
            stored = await Booking.get(id=booking.id)
            assert stored.service_request_ids == [str(r.id) for r in created]
            assert stored.booking_type == BookingType.RENTAL

        in_store(scenario)


# ---------------------------------------------------------------------------
# KYC
# ---------------------------------------------------------------------------


class TestKycStatusMirror:
    def test_submission_marks_user_pending(self):
        async def scenario():
            user = await make_user()
            kyc = await kyc_crud.save_submission(user.id, **proofs())
            assert kyc.status == KycStatus.PENDING
            assert (await User.get(id=user.id)).kyc_status == KycStatus.PENDING

        in_store(scenario)

    def test_status_changes_reach_the_user(self):
        async def scenario():
            user = await make_user()
            admin = await make_user(role="admin")
            kyc = await kyc_crud.save_submission(user.id, **proofs())

            verified = await kyc_crud.set_status(
                kyc.id, KycStatus.VERIFIED, verified_by_id=admin.id, verified_at=NOW
            )
            assert verified.status == KycStatus.VERIFIED
            assert verified.verified_by_id == admin.id
            assert (await User.get(id=user.id)).kyc_status == KycStatus.VERIFIED

        in_store(scenario)

    def test_resubmission_after_rejection_resets_review(self):
        async def scenario():
            user = await make_user()
            admin = await make_user(role="admin")
            kyc = await kyc_crud.save_submission(user.id, **proofs())
            await kyc_crud.set_status(
                kyc.id,
                KycStatus.REJECTED,
                rejection_reason="Blurry document",
                verified_by_id=admin.id,
                verified_at=NOW,
            )
            assert (await User.get(id=user.id)).kyc_status == KycStatus.REJECTED

            again = await kyc_crud.save_submission(user.id, **proofs())
            assert again.id == kyc.id
            assert again.status == KycStatus.PENDING
            assert again.rejection_reason is None
            assert again.verified_by_id is None
            assert await KYC.all().count() == 1
            assert (await User.get(id=user.id)).kyc_status == KycStatus.PENDING

        in_store(scenario)

    def test_set_status_unknown_kyc(self):
        async def scenario():
            assert await kyc_crud.set_status(uuid4(), KycStatus.VERIFIED) is None

        in_store(scenario)
