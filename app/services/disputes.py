"""Dispute service — complaint filing and admin resolution.

Resolution actions:
  verify-and-resolve  property complaint → property back to AVAILABLE
                      user complaint     → filer marked KYC-verified
  dismiss-only        complaint closed, target untouched

The target mutation and ``resolved = True`` are committed together; a missing
target aborts the whole resolution.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.pagination import PaginationParams
from app.domain.complaint import Complaint
from app.domain.enums import PropertyStatus, ResolutionAction
from app.domain.user import User
from app.repositories.complaint import ComplaintRepository
from app.repositories.property import PropertyRepository
from app.repositories.user import UserRepository
from app.services import lifecycle
from app.services.access import require_active, require_admin
from app.services.audit import AuditAction, AuditRecorder

logger = logging.getLogger(__name__)


class DisputeService:
    def __init__(self, session: AsyncSession, recorder: AuditRecorder):
        self._repo = ComplaintRepository(session)
        self._properties = PropertyRepository(session)
        self._users = UserRepository(session)
        self._recorder = recorder

    async def get_complaint(self, complaint_id: str) -> Complaint:
        complaint = await self._repo.get_by_id(complaint_id)
        if not complaint:
            raise NotFoundError("Complaint", complaint_id)
        return complaint

    async def list_complaints(self, pagination: PaginationParams, resolved: bool | None = None):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by="created_at",
            order="desc",
            filters={"resolved": resolved},
        )

    async def open_count(self) -> int:
        return await self._repo.count(Complaint.resolved.is_(False))

    async def file_complaint(
        self, filer: User | None, message: str, property_id: str | None = None
    ) -> Complaint:
        filer = require_active(filer)
        if not message or not message.strip():
            raise ValidationError("Complaint message is required")
        if property_id and not await self._properties.get_by_id(property_id):
            raise NotFoundError("Property", property_id)

        complaint = await self._repo.create(
            user_id=filer.id,
            filer=filer,
            property_id=property_id,
            message=message.strip(),
            resolved=False,
        )
        await self._repo.commit()
        await self._recorder.record(
            AuditAction.FILE_COMPLAINT, complaint.id, {"propertyId": property_id}, actor_id=filer.id
        )
        return complaint

    async def resolve(
        self, complaint_id: str, action: ResolutionAction, actor: User | None
    ) -> Complaint:
        admin = require_admin(actor)
        complaint = await self.get_complaint(complaint_id)
        if complaint.resolved:
            raise ConflictError("Complaint is already resolved")

        action = ResolutionAction(action)
        if action == ResolutionAction.DISMISS_ONLY:
            audit_action, target_id = AuditAction.DISMISS_COMPLAINT, complaint.id
        elif complaint.property_id:
            prop = await self._properties.get_by_id(complaint.property_id)
            if not prop:
                raise NotFoundError("Property", complaint.property_id)
            lifecycle.transition(prop, PropertyStatus.AVAILABLE, lifecycle.actor_name(admin))
            audit_action, target_id = AuditAction.VERIFY_PROPERTY_FROM_COMPLAINT, prop.id
        else:
            user = await self._users.get_by_id(complaint.user_id)
            if not user:
                raise NotFoundError("User", complaint.user_id)
            user.kyc_verified = True
            user.kyc_step = 3
            audit_action, target_id = AuditAction.VERIFY_USER_FROM_COMPLAINT, user.id

        await self._repo.mark_resolved(complaint)
        await self._repo.commit()
        logger.info("Complaint %s resolved (%s) by %s", complaint.id, action.value, admin.id)
        await self._recorder.record(
            audit_action, target_id, {"complaintId": complaint.id}, actor_id=admin.id
        )
        return complaint
