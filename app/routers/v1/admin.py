"""Admin router — audit trail and dashboard counters."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import get_actor, get_audit_recorder
from app.core.response import DataResponse
from app.db.base import get_db
from app.domain.user import User
from app.schemas.complaint import AuditLogOut, DashboardStats
from app.services.access import require_admin
from app.services.audit import AuditRecorder
from app.services.user import UserService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/audit-logs", response_model=DataResponse[list[AuditLogOut]])
async def list_audit_logs(
    limit: int = Query(default=settings.audit_log_limit, ge=1, le=settings.audit_log_limit),
    actor: User | None = Depends(get_actor),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Most recent audit entries, newest first."""
    require_admin(actor)
    logs = await recorder.recent(limit)
    return {"data": [AuditLogOut.model_validate(log) for log in logs]}


@router.get("/stats", response_model=DataResponse[DashboardStats])
async def dashboard_stats(
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    require_admin(actor)
    return {"data": await UserService(session, recorder).dashboard_stats()}
