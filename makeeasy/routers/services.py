from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from makeeasy.crud.catalog import service_crud
from makeeasy.deps import require_admin
from makeeasy.schemas.catalog import (
    ServiceCreate,
    ServiceFilters,
    ServiceResponse,
    ServiceUpdate,
)
from makeeasy.schemas.common import Envelope, Listing, Message, Page, PageParams

router = APIRouter(prefix="/services", tags=["services"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Service not found"
    )


@router.get("/", response_model=Page[ServiceResponse])
async def list_services(filters: ServiceFilters = Depends()):
    services, total = await service_crud.list_services(filters)
    return Page.of(services, total, PageParams(page=filters.page, limit=filters.limit))


@router.get("/featured", response_model=Listing[ServiceResponse])
async def list_featured_services():
    return Listing.of(await service_crud.list_by(featured=True, order_by="-created_at"))


@router.get("/{service_id}", response_model=Envelope[ServiceResponse])
async def get_service(service_id: UUID):
    service = await service_crud.get_by(id=service_id)
    if not service:
        raise _not_found()
    return Envelope(data=service)


@router.post(
    "/",
    response_model=Envelope[ServiceResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_service(payload: ServiceCreate):
    return Envelope(data=await service_crud.create(**payload.model_dump()))


@router.put(
    "/{service_id}",
    response_model=Envelope[ServiceResponse],
    dependencies=[Depends(require_admin)],
)
async def update_service(service_id: UUID, payload: ServiceUpdate):
    service = await service_crud.update_by(
        service_id, **payload.model_dump(exclude_unset=True)
    )
    if not service:
        raise _not_found()
    return Envelope(data=service)


@router.delete(
    "/{service_id}", response_model=Message, dependencies=[Depends(require_admin)]
)
async def delete_service(service_id: UUID):
    if not await service_crud.delete_by(id=service_id):
        raise _not_found()
    return Message(message="Service deleted")
