"""Generic async repository with pagination and store-error translation."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import ConflictError, PersistenceError
from app.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository.

    Rows are never hard-deleted, so no delete is exposed. Writes go through
    ``flush`` / ``commit`` which translate driver errors:
      StaleDataError   → ConflictError (version check lost a race)
      IntegrityError   → ConflictError (unique / FK violation)
      SQLAlchemyError  → PersistenceError
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        return select(self.model)

    def _conflict_message(self, exc: IntegrityError) -> str:
        return f"{self.model.__name__} violates a uniqueness constraint"

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
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional column filters."""
        q = self._base_query()

        # Apply simple equality filters
        if filters:
            for col_name, value in filters.items():
                if value is not None and hasattr(self.model, col_name):
                    q = q.where(getattr(self.model, col_name) == value)

        # Count
        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        # Order + paginate
        col = getattr(self.model, order_by, None)
        if col is not None:
            q = q.order_by(col.desc() if order == "desc" else col.asc())
        q = q.offset(offset).limit(limit)

        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    async def count(self, *criteria) -> int:
        q = select(func.count()).select_from(self.model)
        for criterion in criteria:
            q = q.where(criterion)
        return (await self._session.execute(q)).scalar_one()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(**kwargs)
        self._session.add(instance)
        await self.flush()  # populate id / defaults
        return instance

    async def update(self, instance: ModelT, **values: Any) -> ModelT:
        """Apply attribute changes and flush; the mapper's version check guards the UPDATE."""
        values.pop("id", None)
        for key, value in values.items():
            setattr(instance, key, value)
        await self.flush()
        return instance

    async def flush(self) -> None:
        try:
            await self._session.flush()
        except StaleDataError as exc:
            raise ConflictError(
                f"{self.model.__name__} was modified concurrently; reload and retry"
            ) from exc
        except IntegrityError as exc:
            raise ConflictError(self._conflict_message(exc)) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError() from exc

    async def commit(self) -> None:
        """Flush with error translation, then commit the unit of work."""
        await self.flush()
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError() from exc
