from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from makeeasy.lifecycle import PaymentStatus
from makeeasy.models import OrderStatus, PaymentMethod


class OrderItemIn(BaseModel):
    product_id: UUID | None = None
    service_id: UUID | None = None
    quantity: int = Field(default=1, ge=1)
    start_date: datetime | None = None
    end_date: datetime | None = None


class ShippingAddress(BaseModel):
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None


class OrderCreate(BaseModel):
    items: list[OrderItemIn] = Field(default_factory=list)
    shipping_address: ShippingAddress | None = None
    payment_method: PaymentMethod = PaymentMethod.CARD


class OrderResponse(BaseModel):
    id: UUID
    user_id: UUID
    items: list[dict[str, Any]]
    total_amount: Decimal
    shipping_address: dict[str, Any] | None = None
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    order_status: OrderStatus
    gateway_order_id: str | None = None
    payment_details: dict[str, Any] | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderCreated(BaseModel):
    success: bool = True
    data: OrderResponse
    gateway_order: dict[str, Any] | None = None


class OrderUpdate(BaseModel):
    order_status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None
    shipping_address: ShippingAddress | None = None


class PaymentVerification(BaseModel):
    """Accepts the razorpay_* names Razorpay checkout hands back as well."""

    gateway_order_id: str = Field(
        validation_alias=AliasChoices("gateway_order_id", "razorpay_order_id")
    )
    gateway_payment_id: str = Field(
        validation_alias=AliasChoices("gateway_payment_id", "razorpay_payment_id")
    )
    gateway_signature: str = Field(
        validation_alias=AliasChoices("gateway_signature", "razorpay_signature")
    )
    order_id: UUID
