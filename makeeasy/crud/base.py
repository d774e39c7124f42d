from __future__ import annotations

from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel
from tortoise.models import Model

ModelT = TypeVar("ModelT", bound=Model)
SchemaT = TypeVar("SchemaT", bound=BaseModel)


class CRUD(Generic[ModelT, SchemaT]):
    """
    Thin generic data-access layer over one Tortoise model.

    Every read returns the pydantic `schema` instead of the ORM instance so
    routers never hold live rows. Subclasses add the entity-specific queries.
    """

    def __init__(self, model: type[ModelT], schema: type[SchemaT]):
        self.model = model
        self.schema = schema

    def to_schema(self, inst: ModelT) -> SchemaT:
        return self.schema.model_validate(inst, from_attributes=True)

    async def get_by(self, **filters: Any) -> SchemaT | None:
        inst = await self.model.get_or_none(**filters)
        if inst is None:
            return None
        return self.to_schema(inst)

    async def list_by(
        self,
        *,
        order_by: str | list[str] | None = None,
        offset: int = 0,
        limit: int | None = None,
        **filters: Any,
    ) -> list[SchemaT]:
        qs = self.model.filter(**filters)
        if order_by:
            qs = qs.order_by(*([order_by] if isinstance(order_by, str) else order_by))
        if offset:
            qs = qs.offset(offset)
        if limit is not None:
            qs = qs.limit(limit)
        return [self.to_schema(i) for i in await qs]

    async def count_by(self, **filters: Any) -> int:
        return await self.model.filter(**filters).count()

    async def exists(self, **filters: Any) -> bool:
        return await self.model.filter(**filters).exists()

    async def create(self, **data: Any) -> SchemaT:
        inst = await self.model.create(**data)
        return self.to_schema(inst)

    async def update_by(self, id: UUID, **data: Any) -> SchemaT | None:
        """Apply `data` to the row and save it. None when the row is gone."""
        inst = await self.model.get_or_none(id=id)
        if inst is None:
            return None
        inst.update_from_dict(data)
        await inst.save()
        return self.to_schema(inst)

    async def delete_by(self, **filters: Any) -> bool:
        deleted = await self.model.filter(**filters).delete()
        return deleted > 0
