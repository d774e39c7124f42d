from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from makeeasy.crud.catalog import product_crud
from makeeasy.deps import require_admin
from makeeasy.schemas.catalog import (
    ProductCreate,
    ProductFilters,
    ProductResponse,
    ProductUpdate,
)
from makeeasy.schemas.common import Envelope, Listing, Message, Page, PageParams

router = APIRouter(prefix="/products", tags=["products"])

_JSON_FIELDS = {"city_pricing", "specifications"}


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
    )


def _to_row(payload: ProductCreate | ProductUpdate, partial: bool = False) -> dict:
    """Column values for a product; JSON columns get JSON-safe values."""
    data = payload.model_dump(exclude_unset=partial)
    data.update(
        payload.model_dump(mode="json", include=_JSON_FIELDS, exclude_unset=partial)
    )
    return data


@router.get("/", response_model=Page[ProductResponse])
async def list_products(filters: ProductFilters = Depends()):
    products, total = await product_crud.list_products(filters)
    return Page.of(products, total, PageParams(page=filters.page, limit=filters.limit))


@router.get("/featured", response_model=Listing[ProductResponse])
async def list_featured_products():
    return Listing.of(await product_crud.list_by(featured=True, order_by="-created_at"))


@router.get("/{product_id}", response_model=Envelope[ProductResponse])
async def get_product(product_id: UUID):
    product = await product_crud.get_by(id=product_id)
    if not product:
        raise _not_found()
    return Envelope(data=product)


@router.post(
    "/",
    response_model=Envelope[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_product(payload: ProductCreate):
    return Envelope(data=await product_crud.create(**_to_row(payload)))


@router.put(
    "/{product_id}",
    response_model=Envelope[ProductResponse],
    dependencies=[Depends(require_admin)],
)
async def update_product(product_id: UUID, payload: ProductUpdate):
    product = await product_crud.update_by(product_id, **_to_row(payload, partial=True))
    if not product:
        raise _not_found()
    return Envelope(data=product)


@router.delete(
    "/{product_id}", response_model=Message, dependencies=[Depends(require_admin)]
)
async def delete_product(product_id: UUID):
    if not await product_crud.delete_by(id=product_id):
        raise _not_found()
    return Message(message="Product deleted")
