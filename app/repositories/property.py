"""Property repository."""


from sqlalchemy import select

from app.domain.enums import PropertyStatus
from app.domain.property import Property
from app.repositories.base import BaseRepository


class PropertyRepository(BaseRepository[Property]):
    model = Property

    def _conflict_message(self, exc) -> str:
        return "Property violates a registry uniqueness constraint (UPC or document)"

    async def list_public(self, *, offset: int = 0, limit: int = 20) -> tuple[list[Property], int]:
        q = self._base_query().where(Property.status != PropertyStatus.LOCKED)
        total = await self.count(Property.status != PropertyStatus.LOCKED)
        result = await self._session.execute(
            q.order_by(Property.created_at.desc()).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total

    async def list_all(self) -> list[Property]:
        result = await self._session.execute(
            self._base_query().order_by(Property.fraud_score.desc(), Property.created_at.desc())
        )
        return list(result.scalars().all())
