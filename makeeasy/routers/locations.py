from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from makeeasy.cache import ACTIVE_LOCATIONS_KEY, get_cached, invalidate, set_cached
from makeeasy.crud.catalog import location_crud
from makeeasy.deps import require_admin
from makeeasy.schemas.catalog import LocationCreate, LocationResponse, LocationUpdate
from makeeasy.schemas.common import Envelope, Listing, Message

router = APIRouter(prefix="/locations", tags=["locations"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Location not found"
    )


@router.get("/active", response_model=Listing[LocationResponse])
async def list_active_locations():
    cached = await get_cached(ACTIVE_LOCATIONS_KEY)
    if cached is not None:
        logger.debug("Cache hit for active locations")
        return Listing.of([LocationResponse(**loc) for loc in cached])

    logger.debug("Cache miss for active locations")
    locations = await location_crud.list_active()
    await set_cached(
        ACTIVE_LOCATIONS_KEY, [loc.model_dump(mode="json") for loc in locations]
    )
    return Listing.of(locations)


@router.get("/states", response_model=Listing[str])
async def list_states():
    return Listing.of(await location_crud.list_states())


@router.get("/state/{state}", response_model=Listing[LocationResponse])
async def list_locations_by_state(state: str):
    return Listing.of(await location_crud.list_by_state(state))


@router.get(
    "/all",
    response_model=Listing[LocationResponse],
    dependencies=[Depends(require_admin)],
)
async def list_all_locations():
    return Listing.of(await location_crud.list_by(order_by=["display_order", "city"]))


@router.get(
    "/{location_id}",
    response_model=Envelope[LocationResponse],
    dependencies=[Depends(require_admin)],
)
async def get_location(location_id: UUID):
    location = await location_crud.get_by(id=location_id)
    if not location:
        raise _not_found()
    return Envelope(data=location)


@router.post(
    "/",
    response_model=Envelope[LocationResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_location(payload: LocationCreate):
    location = await location_crud.create(**payload.model_dump())
    await invalidate(ACTIVE_LOCATIONS_KEY)
    return Envelope(message="Location created successfully", data=location)


@router.put(
    "/{location_id}",
    response_model=Envelope[LocationResponse],
    dependencies=[Depends(require_admin)],
)
async def update_location(location_id: UUID, payload: LocationUpdate):
    location = await location_crud.update_by(
        location_id, **payload.model_dump(exclude_unset=True)
    )
    if not location:
        raise _not_found()
    await invalidate(ACTIVE_LOCATIONS_KEY)
    return Envelope(message="Location updated successfully", data=location)


@router.delete(
    "/{location_id}", response_model=Message, dependencies=[Depends(require_admin)]
)
async def delete_location(location_id: UUID):
    if not await location_crud.delete_by(id=location_id):
        raise _not_found()
    await invalidate(ACTIVE_LOCATIONS_KEY)
    return Message(message="Location deleted successfully")


@router.patch(
    "/{location_id}/toggle",
    response_model=Envelope[LocationResponse],
    dependencies=[Depends(require_admin)],
)
async def toggle_location(location_id: UUID):
    location = await location_crud.toggle(location_id)
    if not location:
        raise _not_found()
    await invalidate(ACTIVE_LOCATIONS_KEY)
    return Envelope(data=location)
