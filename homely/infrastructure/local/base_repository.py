"""
Shared SQLAlchemy repository plumbing.

Repositories receive the ``AsyncSession`` of the unit of work they belong to
and never commit on their own.
"""

from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from homely.infrastructure.local.database import Base
from homely.utils.datetime_utils import now_utc

ORMType = TypeVar("ORMType", bound=Base)


class SqlRepository(Generic[ORMType]):
    """Base repository for entities that are physically deleted."""

    model: type[ORMType]

    def __init__(self, session: AsyncSession):
        self._session = session

    def _visible(self) -> list[Any]:
        """Criteria every read must satisfy."""
        return []

    def _select(self) -> Select:
        return select(self.model).where(*self._visible())

    async def _first(self, *criteria: Any, refresh: bool = False) -> ORMType | None:
        query = self._select().where(*criteria)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def _all(self, *criteria: Any, order_by: Sequence[Any] = ()) -> list[ORMType]:
        result = await self._session.execute(self._select().where(*criteria).order_by(*order_by))
        return list(result.scalars().all())

    async def _count(self, *criteria: Any) -> int:
        query = select(func.count()).select_from(self.model).where(*self._visible(), *criteria)
        result = await self._session.execute(query)
        return int(result.scalar_one())

    async def _paginate(
        self,
        criteria: Sequence[Any],
        order_by: Sequence[Any],
        page: int,
        page_size: int,
    ) -> tuple[list[ORMType], int]:
        total = await self._count(*criteria)
        query = (
            self._select()
            .where(*criteria)
            .order_by(*order_by)
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        result = await self._session.execute(query)
        return list(result.scalars().all()), total

    async def _add(self, orm: ORMType) -> ORMType:
        self._session.add(orm)
        await self._session.flush()
        await self._session.refresh(orm)
        return orm

    async def _remove(self, orm: ORMType) -> None:
        await self._session.delete(orm)
        await self._session.flush()


class SoftDeleteRepository(SqlRepository[ORMType]):
    """Base repository for ``SoftDeletable`` models.

    Reads skip rows with ``deleted_at`` set, and removal stamps the column
    instead of deleting the row.
    """

    def _visible(self) -> list[Any]:
        return [self.model.deleted_at.is_(None)]

    async def _remove(self, orm: ORMType) -> None:
        timestamp = now_utc()
        orm.deleted_at = timestamp
        orm.updated_at = timestamp
        await self._session.flush()
