"""Complaint router — file disputes and resolve them from the admin desk."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_actor, get_audit_recorder
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, ListResponse, paginated
from app.db.base import get_db
from app.domain.user import User
from app.schemas.complaint import ComplaintCreate, ComplaintOut, ResolveRequest
from app.services.audit import AuditRecorder
from app.services.disputes import DisputeService

router = APIRouter(prefix="/complaints", tags=["Complaints"])


def _svc(session: AsyncSession, recorder: AuditRecorder) -> DisputeService:
    return DisputeService(session, recorder)


@router.post("", response_model=DataResponse[ComplaintOut], status_code=status.HTTP_201_CREATED)
async def file_complaint(
    body: ComplaintCreate,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    complaint = await _svc(session, recorder).file_complaint(actor, body.message, body.property_id)
    return {"data": ComplaintOut.model_validate(complaint)}


@router.get("", response_model=ListResponse[ComplaintOut])
async def list_complaints(
    resolved: Optional[bool] = Query(default=None, description="Filter by resolution state"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Newest first."""
    items, total = await _svc(session, recorder).list_complaints(pagination, resolved=resolved)
    return paginated(
        [ComplaintOut.model_validate(c) for c in items],
        total, pagination,
    )


@router.post("/{complaint_id}/resolve", response_model=DataResponse[ComplaintOut])
async def resolve_complaint(
    complaint_id: str,
    body: ResolveRequest,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Admin only. ``verify-and-resolve`` clears the target, ``dismiss-only`` closes the case."""
    complaint = await _svc(session, recorder).resolve(complaint_id, body.action, actor)
    return {"data": ComplaintOut.model_validate(complaint)}
