"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; point the app at a throwaway store first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.domain  # noqa: F401
from app.db.base import Base, get_db
from app.core.deps import get_audit_recorder
from app.domain.enums import UserRole
from app.domain.user import User
from app.main import app
from app.schemas.property import PropertyCreate
from app.services.audit import AuditRecorder
from app.services.property import PropertyService
from app.services.verification import IdentityCheck, get_verifier


class StubVerifier:
    """Stands in for the OpenAI-backed oracle; answers are set per test."""

    def __init__(self):
        self.ownership = True
        self.identity = IdentityCheck(confidence=96, verified=True, reason="Name matches")
        self.face = IdentityCheck(confidence=91, verified=True, reason="Same person")
        self.calls: list[tuple] = []

    async def verify_document_ownership(self, document_b64, owner_name):
        self.calls.append(("ownership", owner_name))
        return self.ownership

    async def verify_identity_integrity(self, id_b64, registered_name):
        self.calls.append(("identity", registered_name))
        return self.identity

    async def compare_face_with_id(self, id_b64, face_b64):
        self.calls.append(("face",))
        return self.face


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite file per test; separate sessions see each other's commits."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def recorder(session_factory):
    return AuditRecorder(session_factory)


@pytest.fixture
def verifier():
    return StubVerifier()


@pytest.fixture
async def client(session_factory, recorder, verifier):
    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_audit_recorder] = lambda: recorder
    app.dependency_overrides[get_verifier] = lambda: verifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

async def make_user(session, name="Ada Obi", role=UserRole.LANDLORD, **extra) -> User:
    user = User(
        name=name,
        email=extra.pop("email", f"{uuid.uuid4().hex[:10]}@example.com"),
        role=role,
        **extra,
    )
    session.add(user)
    await session.commit()
    return user


def property_payload(**overrides) -> dict:
    payload = {
        "title": "Lekki Terrace",
        "address": "12 Admiralty Way, Lekki",
        "price": 250000,
        "type": "Sale",
        "images": ["data:image/jpeg;base64,aW1n"],
        "ownershipDocument": f"data:image/jpeg;base64,{uuid.uuid4().hex}",
        "shareConsent": True,
    }
    payload.update(overrides)
    return payload


async def enroll_property(session, recorder, verifier, owner, **overrides):
    service = PropertyService(session, recorder, verifier)
    return await service.enroll(owner, PropertyCreate.model_validate(property_payload(**overrides)))


@pytest.fixture
async def landlord(session):
    return await make_user(session, name="Ada Obi", role=UserRole.LANDLORD)


@pytest.fixture
async def tenant(session):
    return await make_user(session, name="Tunde Bello", role=UserRole.TENANT)


@pytest.fixture
async def admin(session):
    return await make_user(session, name="System Admin", role=UserRole.ADMIN)
