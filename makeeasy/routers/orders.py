from datetime import timedelta
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from makeeasy.crud.catalog import item_price
from makeeasy.crud.orders import order_crud
from makeeasy.dates import utcnow
from makeeasy.deps import CurrentUser, get_current_user, get_payment_gateway
from makeeasy.models import PaymentMethod
from makeeasy.payments import PaymentGateway
from makeeasy.schemas.common import Envelope, Listing, Message
from makeeasy.schemas.order import (
    OrderCreate,
    OrderCreated,
    OrderResponse,
    OrderUpdate,
    PaymentVerification,
)

router = APIRouter(prefix="/orders", tags=["orders"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Order not found"
    )


async def _owned_order(
    order_id: UUID, current_user: CurrentUser, action: str
) -> OrderResponse:
    order = await order_crud.get_by(id=order_id)
    if not order:
        raise _not_found()
    if order.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this order",
        )
    return order


@router.post("/", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    current_user: CurrentUser = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> OrderCreated:
    if not payload.items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No items in order"
        )

    now = utcnow()
    total = Decimal("0")
    items: list[dict] = []
    service_bookings: list[dict] = []
    for item in payload.items:
        if item.product_id is None and item.service_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Each item needs a product_id or a service_id",
            )
        price = await item_price(item.product_id, item.service_id)
        total += price * item.quantity
        items.append({**item.model_dump(mode="json"), "price": str(price)})

        if item.service_id is not None:
            service_bookings.append(
                {
                    "service_id": item.service_id,
                    "start_date": item.start_date or now,
                    "end_date": item.end_date or now + timedelta(days=1),
                    "total_amount": price * item.quantity,
                    "customer_name": current_user.name,
                    "customer_email": current_user.email,
                    "customer_phone": current_user.phone or "N/A",
                }
            )

    order = await order_crud.create_order(
        user_id=current_user.id,
        items=items,
        total_amount=total,
        shipping_address=(
            payload.shipping_address.model_dump(mode="json")
            if payload.shipping_address
            else None
        ),
        payment_method=payload.payment_method,
        service_bookings=service_bookings,
    )
    logger.info("Order created id={} total={}", order.id, total)

    gateway_order = None
    if payload.payment_method != PaymentMethod.COD:
        # On failure the order stays pending and the client gets gateway_order=None.
        gateway_order = await gateway.create_order(total, receipt=str(order.id))
        if gateway_order is not None:
            await order_crud.set_gateway_order(order.id, gateway_order["id"])

    return OrderCreated(data=order, gateway_order=gateway_order)


@router.post("/verify-payment", response_model=Message)
async def verify_payment(
    payload: PaymentVerification,
    _: CurrentUser = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> Message:
    if not gateway.verify_signature(
        payload.gateway_order_id, payload.gateway_payment_id, payload.gateway_signature
    ):
        logger.warning("Payment signature mismatch for order_id={}", payload.order_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature"
        )

    order = await order_crud.mark_paid(
        payload.order_id,
        payment_details={
            "gateway_order_id": payload.gateway_order_id,
            "gateway_payment_id": payload.gateway_payment_id,
            "gateway_signature": payload.gateway_signature,
        },
    )
    if not order:
        raise _not_found()
    logger.info("Payment verified for order_id={}", payload.order_id)
    return Message(message="Payment verified successfully")


@router.get("/", response_model=Listing[OrderResponse])
async def list_orders(current_user: CurrentUser = Depends(get_current_user)):
    if current_user.is_admin:
        orders = await order_crud.list_orders()
    else:
        orders = await order_crud.list_orders(user_id=current_user.id)
    return Listing.of(orders)


@router.get("/{order_id}", response_model=Envelope[OrderResponse])
async def get_order(
    order_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    return Envelope(data=await _owned_order(order_id, current_user, "view"))


@router.put("/{order_id}", response_model=Envelope[OrderResponse])
async def update_order(
    order_id: UUID,
    payload: OrderUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    await _owned_order(order_id, current_user, "update")
    data = payload.model_dump(exclude_unset=True)
    if payload.shipping_address is not None:
        data["shipping_address"] = payload.shipping_address.model_dump(mode="json")
    order = await order_crud.update_order(order_id, **data)
    if not order:
        raise _not_found()
    return Envelope(data=order)
