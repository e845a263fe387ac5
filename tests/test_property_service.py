"""Property commands against a real SQLite store with a stub verifier."""

import pytest
from sqlalchemy import select

from conftest import enroll_property, make_user
from app.core.exceptions import ConflictError, ForbiddenError, UnauthorizedError, ValidationError
from app.core.pagination import PaginationParams
from app.domain.audit import AuditLog
from app.domain.enums import PropertyStatus, RegistryKeyKind, Severity, SignalType, UserRole
from app.repositories.registry_key import RegistryKeyRepository
from app.schemas.property import SignalCreate
from app.schemas.records import load_interested, load_lifecycle, load_signals
from app.services.property import PropertyService, document_fingerprint

PAGE = PaginationParams(page=1, limit=20, sort="created_at", order="desc")


@pytest.fixture
def service(session, recorder, verifier):
    return PropertyService(session, recorder, verifier)


async def _actions(session_factory) -> list[str]:
    async with session_factory() as s:
        return list((await s.execute(select(AuditLog.action))).scalars().all())


# ---------------------------------------------------------------------------
# Enrollment
# ---------------------------------------------------------------------------

async def test_enroll_creates_available_property_with_upc(session, recorder, verifier, landlord, session_factory):
    prop = await enroll_property(session, recorder, verifier, landlord)

    assert prop.status == PropertyStatus.AVAILABLE
    assert prop.upc.startswith("UPC-NG-") and len(prop.upc) == 14
    assert prop.upc[7:].isalnum() and prop.upc[7:].upper() == prop.upc[7:]
    assert prop.owner_name == "Ada Obi"
    [entry] = load_lifecycle(prop.lifecycle_log)
    assert entry.note == "Initial Registry Enrollment"
    assert verifier.calls == [("ownership", "Ada Obi")]
    assert await RegistryKeyRepository(session).exists(RegistryKeyKind.UPC, prop.upc)
    assert "ENROLL_PROPERTY" in await _actions(session_factory)


async def test_enroll_stores_document_fingerprint(session, recorder, verifier, landlord):
    prop = await enroll_property(session, recorder, verifier, landlord, ownershipDocument="deed-123")
    assert prop.document_hash == document_fingerprint("deed-123")
    assert len(prop.document_hash) == 64


async def test_enroll_rejects_reused_ownership_document(session, recorder, verifier, landlord):
    await enroll_property(session, recorder, verifier, landlord, ownershipDocument="deed-123")
    with pytest.raises(ConflictError, match="Property document hash already registered."):
        await enroll_property(session, recorder, verifier, landlord, ownershipDocument="deed-123")


async def test_enroll_rejects_unverified_document(session, recorder, verifier, landlord):
    verifier.ownership = False
    with pytest.raises(ValidationError):
        await enroll_property(session, recorder, verifier, landlord)


async def test_tenant_cannot_enroll(session, recorder, verifier, tenant):
    with pytest.raises(ForbiddenError):
        await enroll_property(session, recorder, verifier, tenant)


async def test_anonymous_enroll_is_unauthorized(session, recorder, verifier):
    with pytest.raises(UnauthorizedError):
        await enroll_property(session, recorder, verifier, None)


async def test_banned_landlord_cannot_enroll(session, recorder, verifier):
    banned = await make_user(session, role=UserRole.LANDLORD, is_banned=True)
    with pytest.raises(ForbiddenError):
        await enroll_property(session, recorder, verifier, banned)


# ---------------------------------------------------------------------------
# Deal workflow
# ---------------------------------------------------------------------------

async def test_sale_scenario_ends_sold_with_three_log_entries(service, session, recorder, verifier, landlord, tenant):
    prop = await enroll_property(session, recorder, verifier, landlord, type="Sale")

    await service.express_interest(prop.id, tenant)
    prop = await service.assign_tenant(prop.id, tenant.id, landlord)
    assert prop.status == PropertyStatus.PENDING_CONFIRMATION
    assert prop.tenant_id == tenant.id

    prop = await service.verify_deal(prop.id, tenant)
    assert prop.status == PropertyStatus.SOLD
    log = load_lifecycle(prop.lifecycle_log)
    assert [e.status for e in log] == [
        PropertyStatus.AVAILABLE,
        PropertyStatus.PENDING_CONFIRMATION,
        PropertyStatus.SOLD,
    ]
    assert log[-1].actor == "Tunde Bello"


async def test_rent_deal_ends_rented(service, session, recorder, verifier, landlord, tenant):
    prop = await enroll_property(session, recorder, verifier, landlord, type="Rent")
    await service.express_interest(prop.id, tenant)
    await service.assign_tenant(prop.id, tenant.id, landlord)
    prop = await service.verify_deal(prop.id, tenant)
    assert prop.status == PropertyStatus.RENTED


async def test_interest_is_recorded_once_per_tenant(service, session, recorder, verifier, landlord, tenant):
    prop = await enroll_property(session, recorder, verifier, landlord)
    await service.express_interest(prop.id, tenant)
    prop = await service.express_interest(prop.id, tenant)

    [entry] = load_interested(prop.interested_tenants)
    assert entry.tenant_id == tenant.id
    assert entry.email == tenant.email


async def test_assign_requires_prior_interest(service, session, recorder, verifier, landlord, tenant):
    prop = await enroll_property(session, recorder, verifier, landlord)
    with pytest.raises(ValidationError):
        await service.assign_tenant(prop.id, tenant.id, landlord)


async def test_only_assigned_tenant_can_verify(service, session, recorder, verifier, landlord, tenant):
    other = await make_user(session, name="Other Tenant", role=UserRole.TENANT)
    prop = await enroll_property(session, recorder, verifier, landlord)
    await service.express_interest(prop.id, tenant)
    await service.assign_tenant(prop.id, tenant.id, landlord)

    with pytest.raises(ForbiddenError):
        await service.verify_deal(prop.id, other)


async def test_critical_risk_blocks_verification(service, session, recorder, verifier, landlord, tenant, admin):
    prop = await enroll_property(session, recorder, verifier, landlord)
    await service.express_interest(prop.id, tenant)
    await service.assign_tenant(prop.id, tenant.id, landlord)
    await service.record_signal(
        prop.id,
        SignalCreate(type=SignalType.DOCUMENT, severity=Severity.HIGH, description="Forged stamp", fraud_score=90),
        admin,
    )

    with pytest.raises(ForbiddenError):
        await service.verify_deal(prop.id, tenant)


async def test_interest_refused_on_locked_property(service, session, recorder, verifier, landlord, tenant):
    prop = await enroll_property(session, recorder, verifier, landlord)
    await service.lock(prop.id, landlord)
    with pytest.raises(ConflictError):
        await service.express_interest(prop.id, tenant)


# ---------------------------------------------------------------------------
# Locks, signals, listings
# ---------------------------------------------------------------------------

async def test_owner_can_self_flag_but_not_unlock(service, session, recorder, verifier, landlord):
    prop = await enroll_property(session, recorder, verifier, landlord)
    prop = await service.lock(prop.id, landlord)
    assert prop.status == PropertyStatus.LOCKED
    assert load_lifecycle(prop.lifecycle_log)[-1].note == "Fraud or Dispute Security Lock"

    with pytest.raises(ForbiddenError):
        await service.unlock(prop.id, landlord)
    with pytest.raises(ForbiddenError):
        await service.change_status(prop.id, PropertyStatus.AVAILABLE, landlord)


async def test_stranger_cannot_lock(service, session, recorder, verifier, landlord, tenant):
    prop = await enroll_property(session, recorder, verifier, landlord)
    with pytest.raises(ForbiddenError):
        await service.lock(prop.id, tenant)


async def test_unlock_keeps_score_and_signals(service, session, recorder, verifier, landlord, admin):
    prop = await enroll_property(session, recorder, verifier, landlord)
    await service.record_signal(
        prop.id,
        SignalCreate(type=SignalType.IP, severity=Severity.MEDIUM, description="VPN exit node", fraud_score=45),
        admin,
    )
    await service.lock(prop.id, admin)
    prop = await service.unlock(prop.id, admin)

    assert prop.status == PropertyStatus.AVAILABLE
    assert prop.fraud_score == 45
    [signal] = load_signals(prop.signals)
    assert signal.description == "VPN exit node"


async def test_record_signal_requires_admin(service, session, recorder, verifier, landlord):
    prop = await enroll_property(session, recorder, verifier, landlord)
    with pytest.raises(ForbiddenError):
        await service.record_signal(
            prop.id, SignalCreate(type=SignalType.IP, severity=Severity.LOW, description="x"), landlord
        )


async def test_public_listing_hides_locked_and_fraud_desk_shows_flagged(
    service, session, recorder, verifier, landlord, admin
):
    visible = await enroll_property(session, recorder, verifier, landlord, title="Visible")
    locked = await enroll_property(session, recorder, verifier, landlord, title="Locked")
    await service.lock(locked.id, admin)
    await service.record_signal(
        visible.id,
        SignalCreate(type=SignalType.BEHAVIOR, severity=Severity.LOW, description="Rapid relisting"),
        admin,
    )

    public, total = await service.list_public(PAGE)
    assert total == 1 and [p.id for p in public] == [visible.id]

    everything, total_all = await service.list_properties(PAGE)
    assert total_all == 2

    desk = await service.fraud_desk()
    assert [p.id for p in desk] == [visible.id]


async def test_same_status_change_is_noop(service, session, recorder, verifier, landlord):
    prop = await enroll_property(session, recorder, verifier, landlord)
    prop = await service.change_status(prop.id, PropertyStatus.AVAILABLE, landlord)
    assert len(prop.lifecycle_log) == 1


@pytest.mark.parametrize(
    "target", [PropertyStatus.SOLD, PropertyStatus.RENTED, PropertyStatus.PENDING_CONFIRMATION]
)
async def test_deal_statuses_cannot_be_set_directly(
    service, session, recorder, verifier, landlord, admin, target
):
    prop = await enroll_property(session, recorder, verifier, landlord)
    await service.record_signal(
        prop.id,
        SignalCreate(type=SignalType.DOCUMENT, severity=Severity.HIGH, description="Forged deed", fraud_score=95),
        admin,
    )

    for actor in (landlord, admin):
        with pytest.raises(ValidationError):
            await service.change_status(prop.id, target, actor)
    assert prop.status == PropertyStatus.AVAILABLE
    assert len(prop.lifecycle_log) == 1
