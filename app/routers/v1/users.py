"""User router — registration, profile, standing and KYC steps.

Pattern:
  1. Inject DB session, acting user and audit recorder via Depends
  2. Instantiate the service with (session, recorder[, verifier])
  3. Call service methods and wrap result in response envelope
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_actor, get_audit_recorder, get_verifier
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, ListResponse, paginated
from app.db.base import get_db
from app.domain.enums import UserRole
from app.domain.user import User
from app.schemas.user import (
    KycBiometricRequest,
    KycIdentityRequest,
    KycResultOut,
    UserCreate,
    UserOut,
    UserRiskUpdate,
    UserUpdate,
)
from app.services import risk
from app.services.audit import AuditRecorder
from app.services.user import UserService
from app.services.verification import VerificationService

router = APIRouter(prefix="/users", tags=["Users"])


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _svc(
    session: AsyncSession,
    recorder: AuditRecorder,
    verifier: VerificationService | None = None,
) -> UserService:
    return UserService(session, recorder, verifier)


def user_out(user: User) -> UserOut:
    return UserOut.model_validate(user).model_copy(update={"is_flagged": risk.is_user_flagged(user)})


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("", response_model=DataResponse[UserOut], status_code=status.HTTP_201_CREATED)
async def register_user(
    body: UserCreate,
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Register a landlord or tenant."""
    user = await _svc(session, recorder).register(body)
    return {"data": user_out(user)}


@router.get("", response_model=ListResponse[UserOut])
async def list_users(
    role: Optional[UserRole] = Query(default=None, description="Filter by role"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    items, total = await _svc(session, recorder).list_users(pagination, role=role)
    return paginated([user_out(u) for u in items], total, pagination)


@router.get("/flagged", response_model=DataResponse[list[UserOut]])
async def list_flagged_users(
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Banned users and users above the fraud threshold."""
    users = await _svc(session, recorder).flagged_users()
    return {"data": [user_out(u) for u in users]}


@router.get("/{user_id}", response_model=DataResponse[UserOut])
async def get_user(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    user = await _svc(session, recorder).get_user(user_id)
    return {"data": user_out(user)}


@router.patch("/{user_id}", response_model=DataResponse[UserOut])
async def update_user(
    user_id: str,
    body: UserUpdate,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    user = await _svc(session, recorder).update_profile(user_id, body, actor)
    return {"data": user_out(user)}


# --- Standing (admin) ---

@router.post("/{user_id}/ban", response_model=DataResponse[UserOut])
async def ban_user(
    user_id: str,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    user = await _svc(session, recorder).ban(user_id, actor)
    return {"data": user_out(user)}


@router.post("/{user_id}/suspend", response_model=DataResponse[UserOut])
async def suspend_user(
    user_id: str,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Suspend for SUSPENSION_MONTHS calendar months from now."""
    user = await _svc(session, recorder).suspend(user_id, actor)
    return {"data": user_out(user)}


@router.post("/{user_id}/reactivate", response_model=DataResponse[UserOut])
async def reactivate_user(
    user_id: str,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    user = await _svc(session, recorder).reactivate(user_id, actor)
    return {"data": user_out(user)}


@router.post("/{user_id}/risk", response_model=DataResponse[UserOut])
async def set_user_risk(
    user_id: str,
    body: UserRiskUpdate,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    user = await _svc(session, recorder).set_fraud_score(user_id, body, actor)
    return {"data": user_out(user)}


# --- KYC ---

@router.post("/{user_id}/kyc/identity", response_model=DataResponse[KycResultOut])
async def submit_identity(
    user_id: str,
    body: KycIdentityRequest,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    verifier: VerificationService = Depends(get_verifier),
):
    check, user = await _svc(session, recorder, verifier).submit_identity(user_id, body.id_document, actor)
    return {"data": KycResultOut(
        verified=check.verified, confidence=check.confidence, reason=check.reason, user=user_out(user),
    )}


@router.post("/{user_id}/kyc/biometric", response_model=DataResponse[KycResultOut])
async def submit_biometric(
    user_id: str,
    body: KycBiometricRequest,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    verifier: VerificationService = Depends(get_verifier),
):
    check, user = await _svc(session, recorder, verifier).submit_biometric(
        user_id, body.id_document, body.face_capture, actor
    )
    return {"data": KycResultOut(
        verified=check.verified, confidence=check.confidence, reason=check.reason, user=user_out(user),
    )}


@router.post("/{user_id}/kyc/complete", response_model=DataResponse[UserOut])
async def complete_kyc(
    user_id: str,
    actor: User | None = Depends(get_actor),
    session: AsyncSession = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    user = await _svc(session, recorder).complete_kyc(user_id, actor)
    return {"data": user_out(user)}
