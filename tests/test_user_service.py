from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from conftest import enroll_property, make_user
from app.core.exceptions import ConflictError, ForbiddenError
from app.core.config import settings
from app.domain.audit import AuditLog
from app.domain.enums import UserRole
from app.schemas.user import UserCreate, UserRiskUpdate, UserUpdate
from app.services.property import PropertyService
from app.services.user import UserService
from app.services.verification import IdentityCheck


@pytest.fixture
def users(session, recorder, verifier):
    return UserService(session, recorder, verifier)


async def test_register_normalises_email_and_starts_kyc_at_zero(users):
    user = await users.register(UserCreate(name="Chika Eze", email="Chika@Example.com", role=UserRole.TENANT))
    assert user.email == "chika@example.com"
    assert user.kyc_step == 0
    assert user.kyc_verified is False


async def test_register_duplicate_email_conflicts(users):
    await users.register(UserCreate(name="Chika", email="chika@example.com"))
    with pytest.raises(ConflictError):
        await users.register(UserCreate(name="Other", email="CHIKA@example.com"))


async def test_admin_cannot_self_register(users):
    with pytest.raises(ForbiddenError):
        await users.register(UserCreate(name="Root", email="root@example.com", role=UserRole.ADMIN))


async def test_profile_update_is_self_or_admin(users, tenant, landlord, admin):
    updated = await users.update_profile(tenant.id, UserUpdate(phone="+2348000000000"), tenant)
    assert updated.phone == "+2348000000000"
    await users.update_profile(tenant.id, UserUpdate(name="Tunde B."), admin)
    assert tenant.name == "Tunde B."
    with pytest.raises(ForbiddenError):
        await users.update_profile(tenant.id, UserUpdate(name="Hijack"), landlord)


async def test_suspend_sets_three_month_deadline(users, tenant, admin):
    user = await users.suspend(tenant.id, admin, now=datetime(2025, 1, 15, tzinfo=timezone.utc))
    assert user.suspension_until == datetime(2025, 4, 15, tzinfo=timezone.utc)


async def test_ban_and_reactivate(users, tenant, admin):
    await users.ban(tenant.id, admin)
    await users.suspend(tenant.id, admin)
    assert tenant.is_banned is True

    user = await users.reactivate(tenant.id, admin)
    assert user.is_banned is False
    assert user.suspension_until is None


async def test_standing_changes_require_admin(users, tenant, landlord):
    with pytest.raises(ForbiddenError):
        await users.ban(tenant.id, landlord)


async def test_fraud_score_above_threshold_flags_user(users, session_factory, tenant, admin):
    await users.set_fraud_score(tenant.id, UserRiskUpdate(fraud_score=20), admin)
    assert await users.flagged_users() == []

    user = await users.set_fraud_score(tenant.id, UserRiskUpdate(fraud_score=21), admin)
    assert user.fraud_score == 21
    assert [u.id for u in await users.flagged_users()] == [tenant.id]

    async with session_factory() as s:
        rows = (await s.execute(select(AuditLog).where(AuditLog.action == "SET_USER_RISK"))).scalars().all()
    assert sorted((row.meta for row in rows), key=lambda m: m["to"]) == [
        {"from": 0, "to": 20},
        {"from": 20, "to": 21},
    ]


async def test_fraud_score_requires_admin(users, tenant, landlord):
    with pytest.raises(ForbiddenError):
        await users.set_fraud_score(tenant.id, UserRiskUpdate(fraud_score=90), landlord)
    assert tenant.fraud_score == 0


async def test_kyc_progression(users, verifier, tenant):
    check, user = await users.submit_identity(tenant.id, "id-doc", tenant)
    assert check.verified and user.kyc_step == 1

    check, user = await users.submit_biometric(tenant.id, "id-doc", "face", tenant)
    assert check.verified and user.kyc_step == 2

    user = await users.complete_kyc(tenant.id, tenant)
    assert user.kyc_step == 3 and user.kyc_verified is True
    assert verifier.calls == [("identity", "Tunde Bello"), ("face",)]


async def test_failed_identity_check_keeps_step(users, verifier, tenant):
    verifier.identity = IdentityCheck(confidence=40, verified=False, reason="Name mismatch")
    check, user = await users.submit_identity(tenant.id, "id-doc", tenant)
    assert check.verified is False
    assert user.kyc_step == 0


async def test_biometric_before_identity_conflicts(users, tenant):
    with pytest.raises(ConflictError):
        await users.submit_biometric(tenant.id, "id-doc", "face", tenant)
    with pytest.raises(ConflictError):
        await users.complete_kyc(tenant.id, tenant)


async def test_flagged_users_and_dashboard_stats(users, session, recorder, verifier, landlord, admin):
    await make_user(session, name="Risky", role=UserRole.TENANT, fraud_score=21)
    await make_user(session, name="Borderline", role=UserRole.TENANT, fraud_score=20)
    await make_user(session, name="Banned", role=UserRole.TENANT, is_banned=True)
    prop = await enroll_property(session, recorder, verifier, landlord)
    await PropertyService(session, recorder, verifier).lock(prop.id, admin)

    assert sorted(u.name for u in await users.flagged_users()) == ["Banned", "Risky"]

    stats = await users.dashboard_stats()
    assert stats.users == 5
    assert stats.flagged_users == 2
    assert stats.properties == 1
    assert stats.locked_properties == 1
    assert stats.open_complaints == 0


async def test_ensure_admin_is_idempotent(users):
    first = await users.ensure_admin()
    second = await users.ensure_admin()
    assert first.id == second.id
    assert first.role == UserRole.ADMIN
    assert first.email == settings.admin_email
