from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from tortoise.expressions import Q
from tortoise.transactions import in_transaction

from makeeasy.crud.base import CRUD
from makeeasy.models import About, AddOn, Banner, Category, Location, Product, Service
from makeeasy.pricing import find_city_pricing
from makeeasy.schemas.catalog import (
    AboutResponse,
    AddOnResponse,
    BannerResponse,
    CategoryResponse,
    DisplayOrder,
    LocationResponse,
    ProductFilters,
    ProductResponse,
    ServiceFilters,
    ServiceResponse,
)


def _search(term: str) -> Q:
    return Q(title__icontains=term) | Q(description__icontains=term)


class ProductCRUD(CRUD[Product, ProductResponse]):  # type: ignore
    async def list_products(
        self, filters: ProductFilters
    ) -> tuple[list[ProductResponse], int]:
        qs = Product.all()
        if filters.category:
            qs = qs.filter(category=filters.category)
        if filters.featured is not None:
            qs = qs.filter(featured=filters.featured)
        if filters.search:
            qs = qs.filter(_search(filters.search))

        offset = (filters.page - 1) * filters.limit
        if filters.city is None:
            total = await qs.count()
            products = await qs.offset(offset).limit(filters.limit)
            return [self.to_schema(p) for p in products], total

        # city pricing lives in a JSON column, so the city filter runs here
        matching = [
            p
            for p in await qs
            if find_city_pricing(p.city_pricing, filters.city) is not None
            or p.location.lower() == filters.city.lower()
        ]
        page = matching[offset : offset + filters.limit]
        return [self.to_schema(p) for p in page], len(matching)


class ServiceCRUD(CRUD[Service, ServiceResponse]):  # type: ignore
    async def list_services(
        self, filters: ServiceFilters
    ) -> tuple[list[ServiceResponse], int]:
        qs = Service.all()
        if filters.featured is not None:
            qs = qs.filter(featured=filters.featured)
        if filters.search:
            qs = qs.filter(_search(filters.search))
        total = await qs.count()
        offset = (filters.page - 1) * filters.limit
        services = await qs.offset(offset).limit(filters.limit)
        return [self.to_schema(s) for s in services], total


class AddOnCRUD(CRUD[AddOn, AddOnResponse]):  # type: ignore
    async def list_active(self) -> list[AddOnResponse]:
        return await self.list_by(active=True, order_by=["display_order", "name"])

    async def get_active_by_ids(self, ids: list[UUID]) -> list[AddOnResponse]:
        """Active add-ons among `ids`; unknown or inactive ids are dropped."""
        if not ids:
            return []
        return await self.list_by(id__in=ids, active=True)


class BannerCRUD(CRUD[Banner, BannerResponse]):  # type: ignore
    async def list_active(self) -> list[BannerResponse]:
        return await self.list_by(
            is_active=True, order_by=["display_order", "-created_at"]
        )

    async def toggle(self, banner_id: UUID) -> BannerResponse | None:
        inst = await Banner.get_or_none(id=banner_id)
        if not inst:
            return None
        inst.is_active = not inst.is_active
        await inst.save(update_fields=["is_active", "updated_at"])
        return self.to_schema(inst)

    async def reorder(self, items: list[DisplayOrder]) -> None:
        async with in_transaction():
            for item in items:
                await Banner.filter(id=item.id).update(display_order=item.display_order)


class LocationCRUD(CRUD[Location, LocationResponse]):  # type: ignore
    async def list_active(self) -> list[LocationResponse]:
        return await self.list_by(is_active=True, order_by=["display_order", "city"])

    async def list_states(self) -> list[str]:
        states = await Location.filter(is_active=True).values_list("state", flat=True)
        return sorted(set(states))

    async def list_by_state(self, state: str) -> list[LocationResponse]:
        return await self.list_by(
            state__iexact=state, is_active=True, order_by=["display_order", "city"]
        )

    async def toggle(self, location_id: UUID) -> LocationResponse | None:
        inst = await Location.get_or_none(id=location_id)
        if not inst:
            return None
        inst.is_active = not inst.is_active
        await inst.save(update_fields=["is_active", "updated_at"])
        return self.to_schema(inst)


category_crud = CRUD(Category, CategoryResponse)
product_crud = ProductCRUD(Product, ProductResponse)
service_crud = ServiceCRUD(Service, ServiceResponse)
add_on_crud = AddOnCRUD(AddOn, AddOnResponse)
banner_crud = BannerCRUD(Banner, BannerResponse)
location_crud = LocationCRUD(Location, LocationResponse)
about_crud = CRUD(About, AboutResponse)


async def item_price(product_id: UUID | None, service_id: UUID | None) -> Decimal:
    """Current catalog price of the product or service a cart/order line names."""
    if product_id is not None:
        product = await product_crud.get_by(id=product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product not found: {product_id}",
            )
        return product.price
    service = await service_crud.get_by(id=service_id)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Service not found: {service_id}",
        )
    return service.price
