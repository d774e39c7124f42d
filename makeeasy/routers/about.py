from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from makeeasy.crud.catalog import about_crud
from makeeasy.deps import require_admin
from makeeasy.schemas.catalog import AboutCreate, AboutResponse, AboutUpdate
from makeeasy.schemas.common import Envelope, Listing, Message

router = APIRouter(prefix="/about", tags=["about"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="About content not found"
    )


@router.get("/", response_model=Listing[AboutResponse])
async def list_about():
    return Listing.of(await about_crud.list_by())


@router.get("/{about_id}", response_model=Envelope[AboutResponse])
async def get_about(about_id: UUID):
    about = await about_crud.get_by(id=about_id)
    if not about:
        raise _not_found()
    return Envelope(data=about)


@router.post(
    "/",
    response_model=Envelope[AboutResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_about(payload: AboutCreate):
    return Envelope(data=await about_crud.create(**payload.model_dump(mode="json")))


@router.put(
    "/{about_id}",
    response_model=Envelope[AboutResponse],
    dependencies=[Depends(require_admin)],
)
async def update_about(about_id: UUID, payload: AboutUpdate):
    about = await about_crud.update_by(
        about_id, **payload.model_dump(mode="json", exclude_unset=True)
    )
    if not about:
        raise _not_found()
    return Envelope(data=about)


@router.delete(
    "/{about_id}", response_model=Message, dependencies=[Depends(require_admin)]
)
async def delete_about(about_id: UUID):
    if not await about_crud.delete_by(id=about_id):
        raise _not_found()
    return Message(message="About content deleted")
