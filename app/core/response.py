"""Response envelopes: `{data: ...}` for single items, `{data: [...], meta: {...}}` for pages."""


import math
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.core.pagination import PageMeta, PaginationParams

T = TypeVar("T")

_ENVELOPE_CONFIG = {
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class DataResponse(BaseModel, Generic[T]):
    data: T

    model_config = _ENVELOPE_CONFIG


class ListResponse(BaseModel, Generic[T]):
    data: list[T]
    meta: PageMeta

    model_config = _ENVELOPE_CONFIG


def paginated(items: list, total: int, pagination: PaginationParams) -> dict:
    """Build a ListResponse-shaped dict for one page of results."""
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": pagination.page,
            "limit": pagination.limit,
            "pages": math.ceil(total / pagination.limit) if total else 0,
        },
    }
