"""
Base repository shared by the user, role and permission repositories.
"""

from contextlib import contextmanager
from typing import Any, Generic, Iterator, Sequence, Type, TypeVar

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.exceptions import Conflict
from rbac_admin.models.base import Base
from rbac_admin.utils.pagination import Page, PageParams

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Integer-keyed CRUD over one mapped class.

    Writes only flush; the request's session decides when to commit. A
    unique or foreign key violation raised by a write (a concurrent request
    got there between our check and our flush) surfaces as ``Conflict``.

    Usage:
        class RoleRepository(BaseRepository[Role]):
            model = Role

        roles = RoleRepository(db)
        role = await roles.get_one(code="editor")
        page = await roles.paginate(PageParams(page=2), [Role.status == 1])
    """

    model: Type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    @contextmanager
    def constraint_guard(self, message: str | None = None) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            raise Conflict(
                message or f"{self.model.__name__} conflicts with existing data"
            ) from exc

    def _base_query(self) -> Select:
        return select(self.model)

    def _default_order(self) -> Sequence[Any]:
        """Listing order; subclasses put their natural order here."""
        return (self.model.id,)

    def _where(self, stmt: Select, conditions: Sequence[Any] = (), **filters) -> Select:
        """AND the SQL ``conditions`` and ``column=value`` filters onto ``stmt``."""
        clauses = list(conditions)
        clauses.extend(getattr(self.model, name) == value for name, value in filters.items())
        return stmt.where(*clauses) if clauses else stmt

    def _count_query(self) -> Select:
        return select(func.count()).select_from(self.model)

    async def get_by_id(self, id: int) -> ModelT | None:
        result = await self.db.execute(self._where(self._base_query(), [self.model.id == id]))
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: Sequence[int]) -> list[ModelT]:
        """Entities whose id is in ``ids``; unknown ids are silently absent."""
        if not ids:
            return []
        result = await self.db.execute(self._where(self._base_query(), [self.model.id.in_(ids)]))
        return list(result.scalars().all())

    async def get_one(self, **filters) -> ModelT | None:
        result = await self.db.execute(self._where(self._base_query(), **filters))
        return result.scalar_one_or_none()

    async def exists(self, *conditions: ColumnElement[bool], **filters) -> bool:
        return await self.count(*conditions, **filters) > 0

    async def count(self, *conditions: ColumnElement[bool], **filters) -> int:
        return await self.db.scalar(self._where(self._count_query(), conditions, **filters)) or 0

    async def paginate(
        self,
        params: PageParams,
        conditions: Sequence[ColumnElement[bool]] = (),
    ) -> Page[ModelT]:
        """
        One page of matching rows in ``_default_order``.

        Args:
            params: Page number (1-indexed) and page size
            conditions: SQL predicates, AND-ed together
        """
        stmt = self._where(self._base_query(), conditions)

        total = await self.db.scalar(select(func.count()).select_from(stmt.subquery())) or 0

        result = await self.db.execute(
            stmt.order_by(*self._default_order()).offset(params.offset).limit(params.limit)
        )

        return Page(
            items=list(result.scalars().all()),
            total=total,
            page=params.page,
            page_size=params.page_size,
        )

    async def all(self, *conditions: ColumnElement[bool]) -> list[ModelT]:
        """Every matching row in ``_default_order``."""
        stmt = self._where(self._base_query(), conditions).order_by(*self._default_order())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **data) -> ModelT:
        entity = self.model(**data)
        self.db.add(entity)
        with self.constraint_guard():
            await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def update(self, entity: ModelT, **data) -> ModelT:
        """Set the given columns on a loaded entity."""
        for name, value in data.items():
            if hasattr(entity, name):
                setattr(entity, name, value)
        with self.constraint_guard():
            await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        """Hard delete; association rows go with it through ON DELETE CASCADE."""
        await self.db.delete(entity)
        with self.constraint_guard():
            await self.db.flush()
