from __future__ import annotations

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T


class Listing(BaseModel, Generic[T]):
    success: bool = True
    count: int
    data: list[T]

    @classmethod
    def of(cls, items: list) -> Listing:
        return cls(count=len(items), data=items)


class Page(BaseModel, Generic[T]):
    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    data: list[T]

    @classmethod
    def of(cls, items: list, total: int, params: PageParams) -> Page:
        return cls(
            count=len(items),
            total=total,
            page=params.page,
            pages=math.ceil(total / params.limit),
            data=items,
        )


class Message(BaseModel):
    success: bool = True
    message: str


class PageParams(BaseModel):
    """Bind to a FastAPI route via Depends(PageParams)."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
