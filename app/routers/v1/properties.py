"""Property router — enrollment, public listing, deal workflow, locks and fraud desk."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_actor, get_audit_recorder, get_verifier
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, ListResponse, paginated
from app.db.base import get_db
from app.domain.enums import ListingType, PropertyStatus
from app.domain.property import Property
from app.domain.user import User
from app.schemas.property import (
    AssignTenantRequest,
    PropertyCreate,
    PropertyOut,
    SignalCreate,
    StatusChangeRequest,
)
from app.services import risk
from app.services.audit import AuditRecorder
from app.services.property import PropertyService
from app.services.verification import VerificationService

router = APIRouter(prefix="/properties", tags=["Properties"])


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _svc(
    session: AsyncSession,
    recorder: AuditRecorder,
    verifier: VerificationService | None = None,
) -> PropertyService:
    return PropertyService(session, recorder, verifier)


def property_out(prop: Property) -> PropertyOut:
    return PropertyOut.model_validate(prop).model_copy(
        update={"is_flagged": risk.is_property_flagged(prop), "is_critical": risk.is_critical(prop)}
    )


# ------------------------------------------------------------------
# Read
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[PropertyOut])
async def list_properties(
    filter_status: Optional[PropertyStatus] = Query(default=None, alias="status"),
    listing_type: Optional[ListingType] = Query(default=None, alias="type"),
    owner_id: Optional[str] = Query(default=None, alias="ownerId"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """All properties, LOCKED included. Filter by ?status=, ?type=Sale|Rent, ?ownerId=."""
    items, total = await _svc(session, recorder).list_properties(
        pagination, status=filter_status, listing_type=listing_type, owner_id=owner_id
    )
    return paginated([property_out(p) for p in items], total, pagination)


@router.get("/public", response_model=ListResponse[PropertyOut])
async def list_public_properties(
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Public listing; LOCKED properties are hidden."""
    items, total = await _svc(session, recorder).list_public(pagination)
    return paginated([property_out(p) for p in items], total, pagination)


@router.get("/fraud-desk", response_model=DataResponse[list[PropertyOut]])
async def fraud_desk(
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    props = await _svc(session, recorder).fraud_desk()
    return {"data": [property_out(p) for p in props]}


@router.get("/{property_id}", response_model=DataResponse[PropertyOut])
async def get_property(
    property_id: str,
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    prop = await _svc(session, recorder).get_property(property_id)
    return {"data": property_out(prop)}


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------

@router.post("", response_model=DataResponse[PropertyOut], status_code=status.HTTP_201_CREATED)
async def enroll_property(
    body: PropertyCreate,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    verifier: VerificationService = Depends(get_verifier),
):
    """Enroll a property after the ownership document is verified against the owner's name."""
    prop = await _svc(session, recorder, verifier).enroll(actor, body)
    return {"data": property_out(prop)}


@router.post("/{property_id}/interest", response_model=DataResponse[PropertyOut])
async def express_interest(
    property_id: str,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    prop = await _svc(session, recorder).express_interest(property_id, actor)
    return {"data": property_out(prop)}


@router.post("/{property_id}/assign", response_model=DataResponse[PropertyOut])
async def assign_tenant(
    property_id: str,
    body: AssignTenantRequest,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    prop = await _svc(session, recorder).assign_tenant(property_id, body.tenant_id, actor)
    return {"data": property_out(prop)}


@router.post("/{property_id}/verify", response_model=DataResponse[PropertyOut])
async def verify_deal(
    property_id: str,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Assigned tenant confirms the deal: Sale → SOLD, Rent → RENTED."""
    prop = await _svc(session, recorder).verify_deal(property_id, actor)
    return {"data": property_out(prop)}


@router.patch("/{property_id}/status", response_model=DataResponse[PropertyOut])
async def change_status(
    property_id: str,
    body: StatusChangeRequest,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    prop = await _svc(session, recorder).change_status(property_id, body.status, actor)
    return {"data": property_out(prop)}


@router.post("/{property_id}/lock", response_model=DataResponse[PropertyOut])
async def lock_property(
    property_id: str,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    prop = await _svc(session, recorder).lock(property_id, actor)
    return {"data": property_out(prop)}


@router.post("/{property_id}/unlock", response_model=DataResponse[PropertyOut])
async def unlock_property(
    property_id: str,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    prop = await _svc(session, recorder).unlock(property_id, actor)
    return {"data": property_out(prop)}


@router.post("/{property_id}/signals", response_model=DataResponse[PropertyOut])
async def record_signal(
    property_id: str,
    body: SignalCreate,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    prop = await _svc(session, recorder).record_signal(property_id, body, actor)
    return {"data": property_out(prop)}
