from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from makeeasy.crud.catalog import add_on_crud
from makeeasy.deps import require_admin
from makeeasy.schemas.catalog import AddOnCreate, AddOnResponse, AddOnUpdate
from makeeasy.schemas.common import Envelope, Listing, Message

router = APIRouter(prefix="/addons", tags=["addons"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Add-on not found"
    )


@router.get("/", response_model=Listing[AddOnResponse])
async def list_add_ons():
    """Active add-ons in display order."""
    return Listing.of(await add_on_crud.list_active())


@router.get("/{add_on_id}", response_model=Envelope[AddOnResponse])
async def get_add_on(add_on_id: UUID):
    add_on = await add_on_crud.get_by(id=add_on_id)
    if not add_on:
        raise _not_found()
    return Envelope(data=add_on)


@router.post(
    "/",
    response_model=Envelope[AddOnResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_add_on(payload: AddOnCreate):
    return Envelope(data=await add_on_crud.create(**payload.model_dump()))


@router.put(
    "/{add_on_id}",
    response_model=Envelope[AddOnResponse],
    dependencies=[Depends(require_admin)],
)
async def update_add_on(add_on_id: UUID, payload: AddOnUpdate):
    # price changes never reach existing bookings: they hold snapshots
    add_on = await add_on_crud.update_by(
        add_on_id, **payload.model_dump(exclude_unset=True)
    )
    if not add_on:
        raise _not_found()
    return Envelope(data=add_on)


@router.delete(
    "/{add_on_id}", response_model=Message, dependencies=[Depends(require_admin)]
)
async def delete_add_on(add_on_id: UUID):
    if not await add_on_crud.delete_by(id=add_on_id):
        raise _not_found()
    return Message(message="Add-on deleted")
