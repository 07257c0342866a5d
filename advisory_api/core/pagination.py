"""Pagination helpers for the document list endpoint."""


from fastapi import Query
from pydantic import BaseModel

_SORTABLE = "^(created_at|updated_at|analyzed_at|file_name|status)$"


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=50&sort=created_at&order=desc`."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=50, ge=1, le=500, description="Documents per page"),
        sort: str = Query(default="created_at", pattern=_SORTABLE, description="Sort field"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
