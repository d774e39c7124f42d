from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from makeeasy.cache import ACTIVE_BANNERS_KEY, get_cached, invalidate, set_cached
from makeeasy.crud.catalog import banner_crud
from makeeasy.deps import require_admin
from makeeasy.schemas.catalog import (
    BannerCreate,
    BannerReorder,
    BannerResponse,
    BannerUpdate,
)
from makeeasy.schemas.common import Envelope, Listing, Message

router = APIRouter(prefix="/banners", tags=["banners"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Banner not found"
    )


@router.get("/active", response_model=Listing[BannerResponse])
async def list_active_banners():
    cached = await get_cached(ACTIVE_BANNERS_KEY)
    if cached is not None:
        logger.debug("Cache hit for active banners")
        return Listing.of([BannerResponse(**b) for b in cached])

    logger.debug("Cache miss for active banners")
    banners = await banner_crud.list_active()
    await set_cached(ACTIVE_BANNERS_KEY, [b.model_dump(mode="json") for b in banners])
    return Listing.of(banners)


@router.get(
    "/all",
    response_model=Listing[BannerResponse],
    dependencies=[Depends(require_admin)],
)
async def list_all_banners():
    banners = await banner_crud.list_by(order_by=["display_order", "-created_at"])
    return Listing.of(banners)


# Declared before /{banner_id} so "reorder" is not taken for an id.
@router.put(
    "/reorder/batch", response_model=Message, dependencies=[Depends(require_admin)]
)
async def reorder_banners(payload: BannerReorder):
    await banner_crud.reorder(payload.banners)
    await invalidate(ACTIVE_BANNERS_KEY)
    return Message(message="Banner order updated successfully")


@router.get(
    "/{banner_id}",
    response_model=Envelope[BannerResponse],
    dependencies=[Depends(require_admin)],
)
async def get_banner(banner_id: UUID):
    banner = await banner_crud.get_by(id=banner_id)
    if not banner:
        raise _not_found()
    return Envelope(data=banner)


@router.post(
    "/",
    response_model=Envelope[BannerResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_banner(payload: BannerCreate):
    banner = await banner_crud.create(**payload.model_dump())
    await invalidate(ACTIVE_BANNERS_KEY)
    return Envelope(message="Banner created successfully", data=banner)


@router.put(
    "/{banner_id}",
    response_model=Envelope[BannerResponse],
    dependencies=[Depends(require_admin)],
)
async def update_banner(banner_id: UUID, payload: BannerUpdate):
    banner = await banner_crud.update_by(
        banner_id, **payload.model_dump(exclude_unset=True)
    )
    if not banner:
        raise _not_found()
    await invalidate(ACTIVE_BANNERS_KEY)
    return Envelope(message="Banner updated successfully", data=banner)


@router.delete(
    "/{banner_id}", response_model=Message, dependencies=[Depends(require_admin)]
)
async def delete_banner(banner_id: UUID):
    if not await banner_crud.delete_by(id=banner_id):
        raise _not_found()
    await invalidate(ACTIVE_BANNERS_KEY)
    return Message(message="Banner deleted successfully")


@router.patch(
    "/{banner_id}/toggle",
    response_model=Envelope[BannerResponse],
    dependencies=[Depends(require_admin)],
)
async def toggle_banner(banner_id: UUID):
    banner = await banner_crud.toggle(banner_id)
    if not banner:
        raise _not_found()
    await invalidate(ACTIVE_BANNERS_KEY)
    state = "activated" if banner.is_active else "deactivated"
    return Envelope(message=f"Banner {state} successfully", data=banner)
