from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, status

from makeeasy.crud.cart import cart_crud
from makeeasy.crud.catalog import item_price
from makeeasy.deps import CurrentUser, get_current_user
from makeeasy.schemas.cart import CartItemAdd, CartItemUpdate, CartResponse
from makeeasy.schemas.common import Envelope

router = APIRouter(prefix="/cart", tags=["cart"])


def _lines(cart: CartResponse) -> list[dict]:
    return [item.model_dump(mode="json") for item in cart.items]


def _same_item(line: dict, payload: CartItemAdd) -> bool:
    product_id = str(payload.product_id) if payload.product_id else None
    service_id = str(payload.service_id) if payload.service_id else None
    return line.get("product_id") == product_id and line.get("service_id") == service_id


@router.get("/", response_model=Envelope[CartResponse])
async def get_cart(current_user: CurrentUser = Depends(get_current_user)):
    return Envelope(data=await cart_crud.get_or_create_for(current_user.id))


@router.post("/", response_model=Envelope[CartResponse])
async def add_to_cart(
    payload: CartItemAdd,
    current_user: CurrentUser = Depends(get_current_user),
):
    if payload.product_id is None and payload.service_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide product_id or service_id",
        )
    price = await item_price(payload.product_id, payload.service_id)

    cart = await cart_crud.get_or_create_for(current_user.id)
    lines = _lines(cart)
    existing = next((line for line in lines if _same_item(line, payload)), None)
    dates = payload.model_dump(
        mode="json", include={"start_date", "end_date"}, exclude_none=True
    )
    if existing is not None:
        existing["quantity"] += payload.quantity
        existing.update(dates)
    else:
        lines.append(
            {
                "id": str(uuid4()),
                "product_id": str(payload.product_id) if payload.product_id else None,
                "service_id": str(payload.service_id) if payload.service_id else None,
                "quantity": payload.quantity,
                "price": str(price),
                "start_date": None,
                "end_date": None,
                **dates,
            }
        )
    return Envelope(data=await cart_crud.replace_items(current_user.id, lines))


@router.put("/{item_id}", response_model=Envelope[CartResponse])
async def update_cart_item(
    item_id: UUID,
    payload: CartItemUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    cart = await cart_crud.get_by(user_id=current_user.id)
    if not cart:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Cart not found"
        )
    lines = _lines(cart)
    line = next((line for line in lines if line["id"] == str(item_id)), None)
    if line is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in cart"
        )
    line["quantity"] = payload.quantity
    return Envelope(data=await cart_crud.replace_items(current_user.id, lines))


@router.delete("/{item_id}", response_model=Envelope[CartResponse])
async def remove_cart_item(
    item_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    cart = await cart_crud.get_by(user_id=current_user.id)
    if not cart:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Cart not found"
        )
    lines = [line for line in _lines(cart) if line["id"] != str(item_id)]
    return Envelope(data=await cart_crud.replace_items(current_user.id, lines))


@router.delete("/", response_model=Envelope[CartResponse])
async def clear_cart(current_user: CurrentUser = Depends(get_current_user)):
    return Envelope(data=await cart_crud.replace_items(current_user.id, []))
