from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from makeeasy.lifecycle import (
    BookingStatus,
    BookingType,
    DeliveryStatus,
    DepositStatus,
    PaymentStatus,
    RentalStatus,
    TimeSlot,
)
from makeeasy.models import BillPaymentMethod, BillStatus
from makeeasy.schemas.catalog import ProductSummary


class BookingResponse(BaseModel):
    id: UUID
    user_id: UUID
    order_id: UUID | None = None
    product_id: UUID | None = None
    service_id: UUID | None = None
    booking_type: BookingType

    selected_city: str | None = None
    selected_tenure: int | None = None
    monthly_rent: Decimal | None = None
    deposit_amount: Decimal | None = None
    deposit_status: DepositStatus | None = None
    delivery_charge: Decimal | None = None
    # [{add_on_id, name, monthly_charge, one_time_charge}]
    selected_add_ons: list[dict[str, Any]] = Field(default_factory=list)

    delivery_address: dict[str, Any] | None = None
    delivery_date: datetime | None = None
    delivery_time_slot: TimeSlot | None = None
    delivery_status: DeliveryStatus | None = None

    rental_status: RentalStatus | None = None
    rental_start_date: datetime | None = None
    planned_end_date: datetime | None = None
    actual_end_date: datetime | None = None
    billing_cycle_start: int | None = None
    next_billing_date: datetime | None = None
    extension_requests: list[dict[str, Any]] = Field(default_factory=list)

    early_closure_requested: bool = False
    early_closure_request_date: datetime | None = None
    early_closure_charge: Decimal | None = None
    pickup_scheduled_date: datetime | None = None
    pickup_time_slot: TimeSlot | None = None

    start_date: datetime
    end_date: datetime
    total_amount: Decimal
    payment_status: PaymentStatus
    booking_status: BookingStatus
    customer_name: str
    customer_email: str
    customer_phone: str
    notes: str | None = None
    service_request_ids: list[UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RentalResponse(BookingResponse):
    """Booking with the rented product attached."""

    product: ProductSummary | None = None


class RentalDetail(RentalResponse):
    remaining_months: int = 0


# ---------------------------------------------------------------------------
# Generic bookings
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    product_id: UUID | None = None
    service_id: UUID | None = None
    start_date: datetime
    end_date: datetime
    total_amount: Decimal = Field(ge=0)
    customer_name: str = Field(min_length=1, max_length=100)
    customer_email: str = Field(min_length=3, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=20)
    notes: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def validate_dates(self) -> BookingCreate:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BookingUpdate(BaseModel):
    notes: str | None = Field(default=None, max_length=500)
    start_date: datetime | None = None
    end_date: datetime | None = None
    customer_name: str | None = Field(default=None, max_length=100)
    customer_email: str | None = Field(default=None, max_length=255)
    customer_phone: str | None = Field(default=None, max_length=20)


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus | None = None


class BookingStatusUpdate(BaseModel):
    booking_status: BookingStatus | None = None


# ---------------------------------------------------------------------------
# Rentals
# ---------------------------------------------------------------------------


class DeliveryAddress(BaseModel):
    address_line1: str = Field(min_length=1)
    address_line2: str | None = None
    city: str = Field(min_length=1)
    state: str | None = None
    pincode: str | None = None
    landmark: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None


class AddOnChoice(BaseModel):
    add_on_id: UUID


class RentalCreate(BaseModel):
    product_id: UUID
    selected_city: str = Field(min_length=1)
    selected_tenure: int = Field(ge=1)
    selected_add_ons: list[AddOnChoice] = Field(default_factory=list)
    delivery_address: DeliveryAddress
    delivery_date: datetime | None = None
    delivery_time_slot: TimeSlot | None = None


class RentalSummary(BaseModel):
    monthly_rent: Decimal
    deposit: Decimal
    delivery_charge: Decimal
    add_ons_monthly: Decimal
    add_ons_one_time: Decimal
    subtotal: Decimal
    gst: Decimal
    total: Decimal


class RentalCreated(BaseModel):
    success: bool = True
    message: str = "Rental booking created successfully"
    data: BookingResponse
    summary: RentalSummary


class ExtensionCreate(BaseModel):
    # checked in the router so the client gets the specific message
    additional_months: int | None = None


class EarlyClosureCharges(BaseModel):
    early_closure_charge: Decimal
    remaining_months: int
    note: str = "Pickup will be scheduled within 2-3 business days"


class EarlyClosureResponse(BaseModel):
    success: bool = True
    message: str = "Early closure request submitted"
    data: BookingResponse
    charges: EarlyClosureCharges


class RentalFilters(BaseModel):
    """Bind to a FastAPI route via Depends(RentalFilters)."""

    status: RentalStatus | None = None
    city: str | None = None

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class RentalStatusUpdate(BaseModel):
    rental_status: RentalStatus | None = None
    delivery_status: DeliveryStatus | None = None
    notes: str | None = Field(default=None, max_length=500)


class DeliverySchedule(BaseModel):
    delivery_date: datetime
    delivery_time_slot: TimeSlot


class PickupSchedule(BaseModel):
    pickup_date: datetime
    pickup_time_slot: TimeSlot


# ---------------------------------------------------------------------------
# Monthly bills
# ---------------------------------------------------------------------------


class BillAddOn(BaseModel):
    add_on_id: UUID | None = None
    name: str
    charge: Decimal = Field(ge=0)


class BillCreate(BaseModel):
    billing_month: int = Field(ge=1, le=12)
    billing_year: int = Field(ge=2000)
    rental_amount: Decimal | None = Field(default=None, ge=0)
    add_ons: list[BillAddOn] | None = None
    late_fee: Decimal = Field(default=Decimal("0"), ge=0)
    due_date: datetime
    notes: str | None = None


class BillPayment(BaseModel):
    payment_status: BillStatus
    payment_method: BillPaymentMethod | None = None
    transaction_id: str | None = None


class BillResponse(BaseModel):
    id: UUID
    user_id: UUID
    booking_id: UUID
    product_id: UUID
    billing_month: int
    billing_year: int
    rental_amount: Decimal
    add_ons: list[dict[str, Any]] = Field(default_factory=list)
    add_on_total: Decimal
    gst: Decimal
    late_fee: Decimal
    total_amount: Decimal
    due_date: datetime
    paid_date: datetime | None = None
    payment_status: BillStatus
    payment_method: BillPaymentMethod | None = None
    transaction_id: str | None = None
    invoice_url: str | None = None
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)
