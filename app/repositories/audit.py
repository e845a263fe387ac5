"""Audit log repository — append and read only."""


from typing import Any

from sqlalchemy import select

from app.core.exceptions import ConflictError
from app.domain.audit import AuditLog
from app.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    model = AuditLog

    async def append(
        self,
        action: str,
        target_id: str | None,
        metadata: dict[str, Any] | None = None,
        actor_id: str | None = None,
    ) -> AuditLog:
        return await self.create(action=action, target_id=target_id, meta=metadata, actor_id=actor_id)

    async def recent(self, limit: int) -> list[AuditLog]:
        result = await self._session.execute(
            select(AuditLog).order_by(AuditLog.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def update(self, instance, **values):
        raise ConflictError("Audit rows are immutable")
