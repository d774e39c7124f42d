from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from makeeasy.crud.catalog import category_crud
from makeeasy.deps import get_file_store, require_admin
from makeeasy.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from makeeasy.schemas.common import Envelope, Listing, Message
from makeeasy.storage import FileStore

router = APIRouter(prefix="/categories", tags=["categories"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Category not found"
    )


@router.get("/", response_model=Listing[CategoryResponse])
async def list_categories():
    return Listing.of(await category_crud.list_by(order_by="name"))


@router.get("/{category_id}", response_model=Envelope[CategoryResponse])
async def get_category(category_id: UUID):
    category = await category_crud.get_by(id=category_id)
    if not category:
        raise _not_found()
    return Envelope(data=category)


@router.post(
    "/",
    response_model=Envelope[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_category(payload: CategoryCreate):
    return Envelope(data=await category_crud.create(**payload.model_dump()))


@router.put(
    "/{category_id}",
    response_model=Envelope[CategoryResponse],
    dependencies=[Depends(require_admin)],
)
async def update_category(category_id: UUID, payload: CategoryUpdate):
    category = await category_crud.update_by(
        category_id, **payload.model_dump(exclude_unset=True)
    )
    if not category:
        raise _not_found()
    return Envelope(data=category)


@router.post(
    "/{category_id}/image",
    response_model=Envelope[CategoryResponse],
    dependencies=[Depends(require_admin)],
)
async def upload_category_image(
    category_id: UUID,
    file: UploadFile = File(...),
    files: FileStore = Depends(get_file_store),
):
    url = await files.save(file, "categories")
    category = await category_crud.update_by(category_id, image=url)
    if not category:
        files.remove(url)
        raise _not_found()
    return Envelope(data=category)


@router.delete(
    "/{category_id}", response_model=Message, dependencies=[Depends(require_admin)]
)
async def delete_category(category_id: UUID):
    if not await category_crud.delete_by(id=category_id):
        raise _not_found()
    return Message(message="Category deleted")
