from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from makeeasy.models import AddOnType

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    key: str = Field(min_length=1, max_length=50)
    icon: str = Field(min_length=1, max_length=50)
    path: str = Field(min_length=1, max_length=100)
    image: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=50)
    key: str | None = Field(default=None, max_length=50)
    icon: str | None = Field(default=None, max_length=50)
    path: str | None = Field(default=None, max_length=100)
    image: str | None = None


class CategoryResponse(CategoryCreate):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class TenurePricing(BaseModel):
    months: int = Field(ge=1)
    monthly_rent: Decimal = Field(ge=0)
    discount_percent: Decimal | None = Field(default=None, ge=0, le=100)


class CityPricing(BaseModel):
    city: str = Field(min_length=1)
    deposit: Decimal = Field(default=Decimal("0"), ge=0)
    delivery_charge: Decimal = Field(default=Decimal("0"), ge=0)
    stock: int = Field(default=0, ge=0)
    available: bool = True
    tenures: list[TenurePricing] = Field(default_factory=list)


class ProductCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    price: Decimal = Field(ge=0)
    location: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1, max_length=100)
    image_url: str | None = None
    available: bool = True
    featured: bool = False
    specifications: dict[str, Any] = Field(default_factory=dict)
    city_pricing: list[CityPricing] = Field(default_factory=list)
    early_closure_charge: Decimal | None = Field(default=None, ge=0)


class ProductUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    price: Decimal | None = Field(default=None, ge=0)
    location: str | None = None
    category: str | None = None
    image_url: str | None = None
    available: bool | None = None
    featured: bool | None = None
    specifications: dict[str, Any] | None = None
    city_pricing: list[CityPricing] | None = None
    early_closure_charge: Decimal | None = Field(default=None, ge=0)


class ProductResponse(ProductCreate):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductSummary(BaseModel):
    id: UUID
    title: str
    image_url: str | None = None
    specifications: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


class ProductFilters(BaseModel):
    """Bind to a FastAPI route via Depends(ProductFilters)."""

    category: str | None = None
    city: str | None = None
    featured: bool | None = None
    search: str | None = None

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class ServiceCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    icon: str = Field(min_length=1, max_length=50)
    image: str | None = None
    price: Decimal = Field(ge=0)
    available: bool = True
    featured: bool = False


class ServiceUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    icon: str | None = None
    image: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    available: bool | None = None
    featured: bool | None = None


class ServiceResponse(ServiceCreate):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ServiceFilters(BaseModel):
    search: str | None = None
    featured: bool | None = None

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


# ---------------------------------------------------------------------------
# Add-ons
# ---------------------------------------------------------------------------


class AddOnCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    type: AddOnType
    monthly_charge: Decimal = Field(ge=0)
    one_time_charge: Decimal = Field(default=Decimal("0"), ge=0)
    coverage: str | None = None
    inclusions: list[str] = Field(default_factory=list)
    exclusions: list[str] = Field(default_factory=list)
    max_coverage_amount: Decimal | None = None
    terms: str | None = None
    image_url: str | None = None
    active: bool = True
    display_order: int = 0


class AddOnUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    type: AddOnType | None = None
    monthly_charge: Decimal | None = Field(default=None, ge=0)
    one_time_charge: Decimal | None = Field(default=None, ge=0)
    coverage: str | None = None
    inclusions: list[str] | None = None
    exclusions: list[str] | None = None
    max_coverage_amount: Decimal | None = None
    terms: str | None = None
    image_url: str | None = None
    active: bool | None = None
    display_order: int | None = None


class AddOnResponse(AddOnCreate):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Banners & locations
# ---------------------------------------------------------------------------


class BannerCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    subtitle: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    image: str = Field(min_length=1)
    link: str | None = None
    button_text: str = Field(default="Learn More", max_length=50)
    is_active: bool = True
    display_order: int = 0


class BannerUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    subtitle: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    image: str | None = Field(default=None, min_length=1)
    link: str | None = None
    button_text: str | None = Field(default=None, max_length=50)
    is_active: bool | None = None
    display_order: int | None = None


class BannerResponse(BannerCreate):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DisplayOrder(BaseModel):
    id: UUID
    display_order: int


class BannerReorder(BaseModel):
    banners: list[DisplayOrder] = Field(min_length=1)


class LocationCreate(BaseModel):
    city: str = Field(min_length=1, max_length=100)
    district: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    icon: str = "MapPin"
    is_active: bool = True
    display_order: int = 0
    is_new: bool = False

    @field_validator("city", "district", "state")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()


class LocationUpdate(BaseModel):
    city: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    icon: str | None = None
    is_active: bool | None = None
    display_order: int | None = None
    is_new: bool | None = None


class LocationResponse(LocationCreate):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# About page
# ---------------------------------------------------------------------------


class AboutCreate(BaseModel):
    mission: dict[str, Any]
    story: dict[str, Any]
    core_values: list[dict[str, Any]] = Field(default_factory=list)
    leadership_team: list[dict[str, Any]] = Field(default_factory=list)
    blog: list[dict[str, Any]] = Field(default_factory=list)
    journey: list[dict[str, Any]] = Field(default_factory=list)
    community: dict[str, Any] = Field(default_factory=dict)


class AboutUpdate(BaseModel):
    mission: dict[str, Any] | None = None
    story: dict[str, Any] | None = None
    core_values: list[dict[str, Any]] | None = None
    leadership_team: list[dict[str, Any]] | None = None
    blog: list[dict[str, Any]] | None = None
    journey: list[dict[str, Any]] | None = None
    community: dict[str, Any] | None = None


class AboutResponse(AboutCreate):
    id: UUID

    model_config = ConfigDict(from_attributes=True)
