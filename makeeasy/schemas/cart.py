from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CartItem(BaseModel):
    id: UUID
    product_id: UUID | None = None
    service_id: UUID | None = None
    quantity: int = Field(ge=1)
    price: Decimal
    start_date: datetime | None = None
    end_date: datetime | None = None


class CartItemAdd(BaseModel):
    product_id: UUID | None = None
    service_id: UUID | None = None
    quantity: int = Field(default=1, ge=1)
    start_date: datetime | None = None
    end_date: datetime | None = None


class CartItemUpdate(BaseModel):
    quantity: int = Field(ge=1)


class CartResponse(BaseModel):
    id: UUID
    user_id: UUID
    items: list[CartItem] = Field(default_factory=list)
    total_amount: Decimal
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
