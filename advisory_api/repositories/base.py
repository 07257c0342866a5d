"""Generic async repository with soft-delete, pagination, and tenant isolation."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from advisory_api.db.base import Base
from advisory_api.domain.mixins import utcnow

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """CRUD repository scoped to one client_id.

    Soft-deleted rows (``deleted_at`` set) are invisible to every read.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession, client_id: str):
        self._session = session
        self._client_id = client_id

    def _base_query(self) -> Select:
        q = select(self.model).where(self.model.client_id == self._client_id)
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 50,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count); ``None`` filter values are ignored."""
        q = self._base_query()
        for col_name, value in (filters or {}).items():
            if value is not None and hasattr(self.model, col_name):
                q = q.where(getattr(self.model, col_name) == value)

        total = (
            await self._session.execute(select(func.count()).select_from(q.subquery()))
        ).scalar_one()

        col = getattr(self.model, order_by, None)
        if col is not None:
            q = q.order_by(col.desc() if order == "desc" else col.asc())
        items = (await self._session.execute(q.offset(offset).limit(limit))).scalars().all()
        return list(items), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(client_id=self._client_id, **kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        kwargs.pop("client_id", None)
        if hasattr(self.model, "updated_at"):
            kwargs.setdefault("updated_at", utcnow())

        await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.client_id == self._client_id)
            .values(**kwargs)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return await self.get_by_id(entity_id)

    async def soft_delete(self, entity_id: str) -> bool:
        result = await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.client_id == self._client_id)
            .where(self.model.deleted_at.is_(None))
            .values(deleted_at=utcnow())
        )
        await self._session.flush()
        return result.rowcount > 0
