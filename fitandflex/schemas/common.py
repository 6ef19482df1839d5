"""Response envelope and pagination schemas shared by every router."""

from __future__ import annotations

import math
from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")
S = TypeVar("S", bound=BaseModel)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str = ""
    data: Optional[T] = None


class PageParams(BaseModel):
    page: int = Field(0, ge=0)
    size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort: str = "id"
    direction: str = "asc"

    @field_validator("direction")
    def validate_direction(cls, value: str) -> str:
        value = value.lower()
        if value not in ("asc", "desc"):
            raise ValueError("direction must be 'asc' or 'desc'")
        return value

    @property
    def offset(self) -> int:
        return self.page * self.size

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


class Page(BaseModel, Generic[T]):
    content: List[T]
    totalElements: int
    totalPages: int
    page: int
    size: int
    numberOfElements: int
    first: bool
    last: bool


def page_of(schema: Type[S], items: Iterable[Any], total: int, params: PageParams) -> Page[S]:
    content = [schema.model_validate(item) for item in items]
    total_pages = math.ceil(total / params.size) if total else 0
    return Page[schema](
        content=content,
        totalElements=total,
        totalPages=total_pages,
        page=params.page,
        size=params.size,
        numberOfElements=len(content),
        first=params.page == 0,
        last=params.page >= total_pages - 1,
    )


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def ok(data: Any = None, message: str = "OK") -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data)


__all__ = [
    "ApiResponse",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "MessageResponse",
    "Page",
    "PageParams",
    "ok",
    "page_of",
]
