# backend/secreports/schemas.py
"""
Shared response shapes.

Every route answers with the same envelope:

    {"success": true, "message": "...", "data": {...}}

List routes add `count`, `total` and `pagination`. Field names go over the
wire in camelCase; Python code keeps snake_case.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from fastapi import Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    current_page: int
    total_pages: int


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ListResponse(CamelModel, Generic[T]):
    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: List[T]


# -------------------------------------------------------------------
# PAGINATION
# -------------------------------------------------------------------


@dataclass(frozen=True)
class PageParams:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def list_response(items: list, *, schema: type, total: int, params: PageParams) -> ListResponse:
    data = [schema.model_validate(item) for item in items]
    return ListResponse(
        count=len(data),
        total=total,
        pagination=Pagination(
            current_page=params.page,
            total_pages=math.ceil(total / params.limit) if total else 0,
        ),
        data=data,
    )


def ok(data=None, message: Optional[str] = None) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data)
