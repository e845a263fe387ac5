"""Property service — enrollment, the deal workflow, locks and risk signals.

Rule: every command is read → mutate → ``repo.commit()``. Properties carry a
``version`` column, so a concurrent writer makes the commit fail with
ConflictError instead of silently overwriting the lifecycle log. The audit
record is written only after the commit succeeds.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
import string

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.core.pagination import PaginationParams
from app.domain.enums import ListingType, PropertyStatus, RegistryKeyKind, UserRole
from app.domain.property import Property
from app.domain.user import User
from app.repositories.property import PropertyRepository
from app.repositories.registry_key import RegistryKeyRepository
from app.schemas.property import PropertyCreate, SignalCreate
from app.schemas.records import (
    InterestedTenant,
    RiskSignal,
    dump_records,
    load_interested,
    load_signals,
)
from app.services import lifecycle, risk
from app.services.access import require_active, require_admin
from app.services.audit import AuditAction, AuditRecorder
from app.services.verification import VerificationService

logger = logging.getLogger(__name__)

UPC_PREFIX = "UPC-NG-"
UPC_ALPHABET = string.digits + string.ascii_uppercase
UPC_ATTEMPTS = 5

# Statuses reachable only through the deal workflow endpoints.
WORKFLOW_STATUSES: dict[PropertyStatus, str] = {
    PropertyStatus.PENDING_CONFIRMATION: "/assign",
    PropertyStatus.SOLD: "/verify",
    PropertyStatus.RENTED: "/verify",
}


def generate_upc() -> str:
    return UPC_PREFIX + "".join(secrets.choice(UPC_ALPHABET) for _ in range(7))


def document_fingerprint(document: str) -> str:
    return hashlib.sha256(document.encode("utf-8")).hexdigest()


class PropertyService:
    def __init__(
        self,
        session: AsyncSession,
        recorder: AuditRecorder,
        verifier: VerificationService | None = None,
    ):
        self._repo = PropertyRepository(session)
        self._keys = RegistryKeyRepository(session)
        self._recorder = recorder
        self._verifier = verifier

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_property(self, property_id: str) -> Property:
        prop = await self._repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property", property_id)
        return prop

    async def list_properties(
        self,
        pagination: PaginationParams,
        status: PropertyStatus | None = None,
        listing_type: ListingType | None = None,
        owner_id: str | None = None,
    ):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"status": status, "listing_type": listing_type, "owner_id": owner_id},
        )

    async def list_public(self, pagination: PaginationParams):
        return await self._repo.list_public(offset=pagination.offset, limit=pagination.limit)

    async def fraud_desk(self) -> list[Property]:
        return [prop for prop in await self._repo.list_all() if risk.is_property_flagged(prop)]

    # ------------------------------------------------------------------
    # Enrollment
    # ------------------------------------------------------------------

    async def enroll(self, owner: User | None, data: PropertyCreate) -> Property:
        owner = require_active(owner)
        if owner.role not in (UserRole.LANDLORD, UserRole.ADMIN):
            raise ForbiddenError("Only landlords can enroll properties")

        if not await self._verifier.verify_document_ownership(data.ownership_document, owner.name):
            raise ValidationError(
                "Name on document does not match your registered name. Property verification failed."
            )

        document_hash = document_fingerprint(data.ownership_document)
        if await self._keys.exists(RegistryKeyKind.DOCUMENT_HASH, document_hash):
            raise ConflictError("Property document hash already registered.")
        upc = await self._allocate_upc()

        prop = await self._repo.create(
            owner_id=owner.id,
            owner=owner,
            title=data.title.strip(),
            address=data.address.strip(),
            description=data.description,
            price=data.price,
            listing_type=data.listing_type,
            property_type=data.property_type,
            units=data.units,
            latitude=data.latitude,
            longitude=data.longitude,
            status=PropertyStatus.AVAILABLE,
            upc=upc,
            document_hash=document_hash,
            fraud_score=0,
            signals=[],
            images=[img for img in data.images if img],
            interested_tenants=[],
            lifecycle_log=dump_records([lifecycle.enrollment_entry(owner.name)]),
        )
        await self._keys.reserve(RegistryKeyKind.UPC, upc, prop.id)
        try:
            await self._keys.reserve(RegistryKeyKind.DOCUMENT_HASH, document_hash, prop.id)
        except ConflictError as exc:
            raise ConflictError("Property document hash already registered.") from exc
        await self._repo.commit()

        logger.info("Enrolled property %s (%s) for owner %s", prop.id, upc, owner.id)
        await self._recorder.record(
            AuditAction.ENROLL_PROPERTY, prop.id, {"upc": upc}, actor_id=owner.id
        )
        return prop

    async def _allocate_upc(self) -> str:
        for _ in range(UPC_ATTEMPTS):
            upc = generate_upc()
            if not await self._keys.exists(RegistryKeyKind.UPC, upc):
                return upc
        raise ConflictError("Could not allocate a unique UPC; retry enrollment")

    # ------------------------------------------------------------------
    # Deal workflow: interest → assign → verify
    # ------------------------------------------------------------------

    async def express_interest(self, property_id: str, tenant: User | None) -> Property:
        tenant = require_active(tenant)
        prop = await self.get_property(property_id)
        if tenant.role != UserRole.TENANT:
            raise ForbiddenError("Only tenants can express interest")
        if tenant.id == prop.owner_id:
            raise ForbiddenError("Owners cannot express interest in their own property")
        if prop.status != PropertyStatus.AVAILABLE or not risk.is_publicly_listed(prop):
            raise ConflictError("Property is not open for interest")

        interested = load_interested(prop.interested_tenants)
        if any(entry.tenant_id == tenant.id for entry in interested):
            return prop

        interested.append(
            InterestedTenant(tenant_id=tenant.id, name=tenant.name, email=tenant.email)
        )
        prop.interested_tenants = dump_records(interested)
        await self._repo.commit()
        await self._recorder.record(AuditAction.EXPRESS_INTEREST, prop.id, actor_id=tenant.id)
        return prop

    async def assign_tenant(self, property_id: str, tenant_id: str, actor: User | None) -> Property:
        actor = require_active(actor)
        prop = await self.get_property(property_id)
        self._require_owner_or_admin(actor, prop)
        if prop.status != PropertyStatus.AVAILABLE:
            raise ConflictError("Only available properties can be assigned")
        if not any(entry.tenant_id == tenant_id for entry in load_interested(prop.interested_tenants)):
            raise ValidationError("Tenant has not expressed interest in this property")

        prop.tenant_id = tenant_id
        lifecycle.transition(prop, PropertyStatus.PENDING_CONFIRMATION, lifecycle.actor_name(actor))
        await self._repo.commit()
        await self._recorder.record(
            AuditAction.ASSIGN_TENANT, prop.id, {"tenantId": tenant_id}, actor_id=actor.id
        )
        return prop

    async def verify_deal(self, property_id: str, actor: User | None) -> Property:
        actor = require_active(actor)
        prop = await self.get_property(property_id)
        if prop.status != PropertyStatus.PENDING_CONFIRMATION:
            raise ConflictError("Deal can only be verified while pending confirmation")
        if actor.id != prop.tenant_id and not risk.is_admin(actor):
            raise ForbiddenError("Only the assigned tenant can verify this deal")
        if not risk.can_finalize_deal(prop):
            raise ForbiddenError("Deal finalization is blocked by the property's risk profile")

        final_status = lifecycle.verify_deal(prop, lifecycle.actor_name(actor))
        await self._repo.commit()
        logger.info("Deal on property %s finalized as %s", prop.id, final_status.value)
        await self._recorder.record(
            AuditAction.VERIFY_DEAL, prop.id, {"finalStatus": final_status.value}, actor_id=actor.id
        )
        return prop

    # ------------------------------------------------------------------
    # Status, locks, signals
    # ------------------------------------------------------------------

    async def change_status(
        self, property_id: str, new_status: PropertyStatus, actor: User | None
    ) -> Property:
        """Generic owner/admin move. Deal statuses go through ``/assign`` and ``/verify``."""
        actor = require_active(actor)
        prop = await self.get_property(property_id)
        self._require_owner_or_admin(actor, prop)
        new_status = PropertyStatus(new_status)
        if new_status in WORKFLOW_STATUSES and new_status != prop.status:
            raise ValidationError(
                f"{new_status.value} is set by the deal workflow; use {WORKFLOW_STATUSES[new_status]}"
            )
        if prop.status == PropertyStatus.LOCKED and not risk.can_unlock(actor):
            raise ForbiddenError("Only an admin can release a locked property")

        previous = prop.status
        if lifecycle.transition(prop, new_status, lifecycle.actor_name(actor)):
            await self._repo.commit()
            await self._recorder.record(
                AuditAction.PROPERTY_STATUS_CHANGE,
                prop.id,
                {"from": previous.value, "to": prop.status.value},
                actor_id=actor.id,
            )
        return prop

    async def lock(self, property_id: str, actor: User | None) -> Property:
        actor = require_active(actor)
        prop = await self.get_property(property_id)
        if not risk.can_lock(actor, prop):
            raise ForbiddenError("Only the owner or an admin can lock this property")

        if lifecycle.transition(prop, PropertyStatus.LOCKED, lifecycle.actor_name(actor)):
            await self._repo.commit()
            logger.info("Property %s locked by %s", prop.id, actor.id)
            await self._recorder.record(AuditAction.LOCK_PROPERTY, prop.id, actor_id=actor.id)
        return prop

    async def unlock(self, property_id: str, actor: User | None) -> Property:
        """Admin release. Fraud score and signals are left as they are."""
        admin = require_admin(actor)
        prop = await self.get_property(property_id)

        if lifecycle.transition(prop, PropertyStatus.AVAILABLE, lifecycle.actor_name(admin)):
            await self._repo.commit()
            logger.info("Property %s unlocked by %s", prop.id, admin.id)
            await self._recorder.record(AuditAction.UNLOCK_PROPERTY, prop.id, actor_id=admin.id)
        return prop

    async def record_signal(self, property_id: str, data: SignalCreate, actor: User | None) -> Property:
        admin = require_admin(actor)
        prop = await self.get_property(property_id)

        signal = RiskSignal(type=data.type, severity=data.severity, description=data.description)
        prop.signals = dump_records([*load_signals(prop.signals), signal])
        if data.fraud_score is not None:
            prop.fraud_score = data.fraud_score
        await self._repo.commit()
        await self._recorder.record(
            AuditAction.RECORD_SIGNAL,
            prop.id,
            {"type": signal.type.value, "severity": signal.severity.value, "fraudScore": prop.fraud_score},
            actor_id=admin.id,
        )
        return prop

    @staticmethod
    def _require_owner_or_admin(actor: User, prop: Property) -> None:
        if not (risk.is_owner(actor, prop) or risk.is_admin(actor)):
            raise ForbiddenError("Only the owner or an admin can manage this property")
