from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from makeeasy.crud.bookings import booking_crud
from makeeasy.crud.catalog import product_crud, service_crud
from makeeasy.deps import CurrentUser, get_current_user, require_admin
from makeeasy.lifecycle import BookingType, booking_type_for
from makeeasy.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
    PaymentStatusUpdate,
)
from makeeasy.schemas.common import Envelope, Listing, Message

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
    )


async def _owned_booking(
    booking_id: UUID, current_user: CurrentUser, action: str
) -> BookingResponse:
    booking = await booking_crud.get_by(id=booking_id)
    if not booking:
        raise _not_found()
    if booking.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this booking",
        )
    return booking


@router.get("/", response_model=Listing[BookingResponse])
async def list_bookings(current_user: CurrentUser = Depends(get_current_user)):
    if current_user.is_admin:
        bookings = await booking_crud.list_bookings()
    else:
        bookings = await booking_crud.list_bookings(user_id=current_user.id)
    return Listing.of(bookings)


@router.get("/{booking_id}", response_model=Envelope[BookingResponse])
async def get_booking(
    booking_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    return Envelope(data=await _owned_booking(booking_id, current_user, "access"))


@router.post(
    "/", response_model=Envelope[BookingResponse], status_code=status.HTTP_201_CREATED
)
async def create_booking(
    payload: BookingCreate,
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        booking_type = booking_type_for(payload.product_id, payload.service_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from None

    if booking_type == BookingType.RENTAL:
        item, label = await product_crud.get_by(id=payload.product_id), "Product"
    else:
        item, label = await service_crud.get_by(id=payload.service_id), "Service"
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found"
        )
    if not item.available:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} is not available for booking",
        )

    booking = await booking_crud.create(user_id=current_user.id, **payload.model_dump())
    logger.info("Booking created id={} type={}", booking.id, booking.booking_type)
    return Envelope(data=booking)


@router.put("/{booking_id}", response_model=Envelope[BookingResponse])
async def update_booking(
    booking_id: UUID,
    payload: BookingUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    await _owned_booking(booking_id, current_user, "update")
    if current_user.is_admin:
        data = payload.model_dump(exclude_unset=True)
    else:
        # customers may only annotate their booking
        data = payload.model_dump(include={"notes"}, exclude_unset=True)
    booking = await booking_crud.update_by(booking_id, **data)
    if not booking:
        raise _not_found()
    return Envelope(data=booking)


@router.delete("/{booking_id}", response_model=Message)
async def delete_booking(
    booking_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    await _owned_booking(booking_id, current_user, "delete")
    if not await booking_crud.delete_by(id=booking_id):
        raise _not_found()
    return Message(message="Booking deleted")


@router.put(
    "/{booking_id}/payment",
    response_model=Envelope[BookingResponse],
    dependencies=[Depends(require_admin)],
)
async def update_payment_status(booking_id: UUID, payload: PaymentStatusUpdate):
    if payload.payment_status is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide payment status",
        )
    booking = await booking_crud.update_by(
        booking_id, payment_status=payload.payment_status
    )
    if not booking:
        raise _not_found()
    return Envelope(data=booking)


@router.put(
    "/{booking_id}/status",
    response_model=Envelope[BookingResponse],
    dependencies=[Depends(require_admin)],
)
async def update_booking_status(booking_id: UUID, payload: BookingStatusUpdate):
    if payload.booking_status is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide booking status",
        )
    booking = await booking_crud.update_by(
        booking_id, booking_status=payload.booking_status
    )
    if not booking:
        raise _not_found()
    return Envelope(data=booking)
