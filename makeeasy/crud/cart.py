from __future__ import annotations

from uuid import UUID

from makeeasy.crud.base import CRUD
from makeeasy.models import Cart
from makeeasy.schemas.cart import CartResponse


class CartCRUD(CRUD[Cart, CartResponse]):  # type: ignore
    async def get_or_create_for(self, user_id: UUID) -> CartResponse:
        inst, _ = await Cart.get_or_create(user_id=user_id)
        return self.to_schema(inst)

    async def replace_items(self, user_id: UUID, items: list[dict]) -> CartResponse:
        """Overwrite the cart's lines; the model recomputes total_amount on save."""
        inst, _ = await Cart.get_or_create(user_id=user_id)
        inst.items = items
        await inst.save()
        return self.to_schema(inst)


cart_crud = CartCRUD(Cart, CartResponse)
