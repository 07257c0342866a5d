"""JSON response envelopes shared by the v1 routers."""


import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from advisory_api.core.pagination import PageMeta

T = TypeVar("T")

_CAMEL = {"populate_by_name": True, "alias_generator": to_camel}


class DataResponse(BaseModel, Generic[T]):
    """`{ success, message, data }` — the dashboard checks `success` first."""

    success: bool = True
    message: str | None = None
    data: T

    model_config = _CAMEL


class ListResponse(BaseModel, Generic[T]):
    """`{ success, data: [...], count, meta }`"""

    success: bool = True
    data: list[T]
    count: int
    meta: PageMeta

    model_config = _CAMEL


def paginated(items: list, total: int, page: int, limit: int) -> dict[str, Any]:
    """Build a paginated response dict for use with ListResponse."""
    return {
        "data": items,
        "count": len(items),
        "meta": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 1,
        },
    }
