"""Shared FastAPI dependencies: acting user, audit recorder, verification oracle."""


from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UnauthorizedError
from app.db.base import async_session_factory, get_db
from app.domain.user import User
from app.repositories.user import UserRepository
from app.services.audit import AuditRecorder
from app.services.verification import get_verifier

__all__ = ["get_actor", "get_audit_recorder", "get_verifier"]


async def get_actor(
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
    session: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve ``X-Actor-Id`` to a user. No header means an anonymous call."""
    if not x_actor_id:
        return None
    actor = await UserRepository(session).get_by_id(x_actor_id)
    if not actor:
        raise UnauthorizedError("Unknown actor")
    return actor


def get_audit_recorder() -> AuditRecorder:
    return AuditRecorder(async_session_factory)
