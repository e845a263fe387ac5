"""Audit recorder — best-effort, append-only log of privileged actions.

Each record is written in its own session AFTER the business mutation has
committed, so a failing audit write can neither block nor roll back the action
it describes. Failures are logged and swallowed.
"""


import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.domain.audit import AuditLog
from app.repositories.audit import AuditLogRepository

logger = logging.getLogger(__name__)

class AuditAction:
    ENROLL_PROPERTY = "ENROLL_PROPERTY"
    PROPERTY_STATUS_CHANGE = "PROPERTY_STATUS_CHANGE"
    EXPRESS_INTEREST = "EXPRESS_INTEREST"
    ASSIGN_TENANT = "ASSIGN_TENANT"
    VERIFY_DEAL = "VERIFY_DEAL"
    LOCK_PROPERTY = "LOCK_PROPERTY"
    UNLOCK_PROPERTY = "UNLOCK_PROPERTY"
    RECORD_SIGNAL = "RECORD_SIGNAL"
    REGISTER_USER = "REGISTER_USER"
    BAN_USER = "BAN_USER"
    SUSPEND_USER = "SUSPEND_USER"
    REACTIVATE_USER = "REACTIVATE_USER"
    SET_USER_RISK = "SET_USER_RISK"
    KYC_STEP = "KYC_STEP"
    FILE_COMPLAINT = "FILE_COMPLAINT"
    VERIFY_PROPERTY_FROM_COMPLAINT = "VERIFY_PROPERTY_FROM_COMPLAINT"
    VERIFY_USER_FROM_COMPLAINT = "VERIFY_USER_FROM_COMPLAINT"
    DISMISS_COMPLAINT = "DISMISS_COMPLAINT"

class AuditRecorder:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record(
        self,
        action: str,
        target_id: str | None,
        metadata: dict[str, Any] | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Persist an audit row. Swallows all errors to avoid cascading failures."""
        try:
            async with self._session_factory() as session:
                await AuditLogRepository(session).append(action, target_id, metadata, actor_id)
                await session.commit()
        except Exception:
            logger.exception("Audit write failed: action=%s target=%s", action, target_id)

    async def recent(self, limit: int | None = None) -> list[AuditLog]:
        """Newest first, capped at ``settings.audit_log_limit``."""
        cap = settings.audit_log_limit
        limit = cap if limit is None else max(1, min(limit, cap))
        async with self._session_factory() as session:
            return await AuditLogRepository(session).recent(limit)
