"""User service — registration, profile, standing (ban / suspend) and KYC.

Every mutation commits first and audits second; see ``app.services.audit``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.core.pagination import PaginationParams
from app.domain.complaint import Complaint
from app.domain.enums import PropertyStatus, UserRole
from app.domain.property import Property
from app.domain.user import User
from app.repositories.complaint import ComplaintRepository
from app.repositories.property import PropertyRepository
from app.repositories.user import UserRepository
from app.schemas.complaint import DashboardStats
from app.schemas.user import UserCreate, UserRiskUpdate, UserUpdate
from app.services import risk
from app.services.access import require_admin, require_self_or_admin
from app.services.audit import AuditAction, AuditRecorder
from app.services.verification import IdentityCheck, VerificationService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        session: AsyncSession,
        recorder: AuditRecorder,
        verifier: VerificationService | None = None,
    ):
        self._repo = UserRepository(session)
        self._session = session
        self._recorder = recorder
        self._verifier = verifier

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def list_users(self, pagination: PaginationParams, role: UserRole | None = None):
        filters = {"role": role} if role else None
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def flagged_users(self) -> list[User]:
        candidates = await self._repo.list_risk_candidates(settings.user_flag_threshold)
        return [user for user in candidates if risk.is_user_flagged(user)]

    async def dashboard_stats(self) -> DashboardStats:
        properties = PropertyRepository(self._session)
        complaints = ComplaintRepository(self._session)
        return DashboardStats(
            users=await self._repo.count(),
            flagged_users=len(await self.flagged_users()),
            properties=await properties.count(),
            locked_properties=await properties.count(Property.status == PropertyStatus.LOCKED),
            open_complaints=await complaints.count(Complaint.resolved.is_(False)),
        )

    # ------------------------------------------------------------------
    # Registration & profile
    # ------------------------------------------------------------------

    async def register(self, data: UserCreate) -> User:
        if data.role == UserRole.ADMIN:
            raise ForbiddenError("Admin accounts cannot be self-registered")
        email = data.email.strip().lower()
        if await self._repo.get_by_email(email):
            raise ConflictError("A user with this email is already registered")

        user = await self._repo.create(
            name=data.name.strip(),
            email=email,
            role=data.role,
            phone=data.phone,
            kyc_step=0,
        )
        await self._repo.commit()
        logger.info("Registered %s %s", user.role.value, user.id)
        await self._recorder.record(
            AuditAction.REGISTER_USER, user.id, {"role": user.role.value}, actor_id=user.id
        )
        return user

    async def update_profile(self, user_id: str, data: UserUpdate, actor: User | None) -> User:
        require_self_or_admin(actor, user_id)
        user = await self.get_user(user_id)
        await self._repo.update(user, **data.model_dump(exclude_unset=True, exclude_none=True))
        await self._repo.commit()
        return user

    async def ensure_admin(self) -> User:
        """Seed the system administrator when absent. Idempotent."""
        admin = await self._repo.get_by_email(settings.admin_email)
        if admin:
            return admin
        admin = await self._repo.create(
            name=settings.admin_name,
            email=settings.admin_email.lower(),
            role=UserRole.ADMIN,
            email_verified=True,
            kyc_verified=True,
            kyc_step=3,
        )
        await self._repo.commit()
        logger.info("Seeded system admin %s", admin.email)
        return admin

    # ------------------------------------------------------------------
    # Standing
    # ------------------------------------------------------------------

    async def ban(self, user_id: str, actor: User | None) -> User:
        admin = require_admin(actor)
        user = await self.get_user(user_id)
        await self._repo.update(user, is_banned=True)
        await self._repo.commit()
        logger.info("User %s banned by %s", user.id, admin.id)
        await self._recorder.record(AuditAction.BAN_USER, user.id, actor_id=admin.id)
        return user

    async def suspend(self, user_id: str, actor: User | None, now: datetime | None = None) -> User:
        admin = require_admin(actor)
        user = await self.get_user(user_id)
        until = risk.suspension_deadline(now or datetime.now(timezone.utc))
        await self._repo.update(user, suspension_until=until)
        await self._repo.commit()
        logger.info("User %s suspended until %s by %s", user.id, until.isoformat(), admin.id)
        await self._recorder.record(
            AuditAction.SUSPEND_USER, user.id, {"until": until.isoformat()}, actor_id=admin.id
        )
        return user

    async def reactivate(self, user_id: str, actor: User | None) -> User:
        admin = require_admin(actor)
        user = await self.get_user(user_id)
        await self._repo.update(user, is_banned=False, suspension_until=None)
        await self._repo.commit()
        logger.info("User %s reactivated by %s", user.id, admin.id)
        await self._recorder.record(AuditAction.REACTIVATE_USER, user.id, actor_id=admin.id)
        return user

    async def set_fraud_score(self, user_id: str, data: UserRiskUpdate, actor: User | None) -> User:
        """Record a score from an external scorer. Above 20 the user is flagged."""
        admin = require_admin(actor)
        user = await self.get_user(user_id)
        previous = user.fraud_score
        await self._repo.update(user, fraud_score=data.fraud_score)
        await self._repo.commit()
        logger.info("User %s fraud score %s -> %s by %s", user.id, previous, user.fraud_score, admin.id)
        await self._recorder.record(
            AuditAction.SET_USER_RISK,
            user.id,
            {"from": previous, "to": user.fraud_score},
            actor_id=admin.id,
        )
        return user

    # ------------------------------------------------------------------
    # KYC (0 none → 1 ID verified → 2 biometric matched → 3 complete)
    # ------------------------------------------------------------------

    async def submit_identity(self, user_id: str, id_document: str, actor: User | None) -> tuple[IdentityCheck, User]:
        require_self_or_admin(actor, user_id)
        user = await self.get_user(user_id)
        check = await self._verifier.verify_identity_integrity(id_document, user.name)
        if check.verified:
            await self._advance_kyc(user, 1, check, actor)
        return check, user

    async def submit_biometric(
        self, user_id: str, id_document: str, face_capture: str, actor: User | None
    ) -> tuple[IdentityCheck, User]:
        require_self_or_admin(actor, user_id)
        user = await self.get_user(user_id)
        if user.kyc_step < 1:
            raise ConflictError("Identity document must be verified before biometric capture")
        check = await self._verifier.compare_face_with_id(id_document, face_capture)
        if check.verified:
            await self._advance_kyc(user, 2, check, actor)
        return check, user

    async def complete_kyc(self, user_id: str, actor: User | None) -> User:
        require_self_or_admin(actor, user_id)
        user = await self.get_user(user_id)
        if user.kyc_step < 2:
            raise ConflictError("Biometric verification must pass before completing KYC")
        await self._repo.update(user, kyc_step=3, kyc_verified=True)
        await self._repo.commit()
        await self._recorder.record(AuditAction.KYC_STEP, user.id, {"step": 3}, actor_id=actor.id)
        return user

    async def _advance_kyc(self, user: User, step: int, check: IdentityCheck, actor: User) -> None:
        await self._repo.update(user, kyc_step=max(user.kyc_step, step))
        await self._repo.commit()
        await self._recorder.record(
            AuditAction.KYC_STEP,
            user.id,
            {"step": step, "confidence": check.confidence},
            actor_id=actor.id,
        )
