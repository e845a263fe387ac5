"""Versioned records stored in the JSON columns of ``properties``.

Every record carries ``schema_version``. Stored payloads pass through an
``upgrade_*`` function before validation:

  v0 (unversioned) — camelCase keys, display-label statuses ("Pending
                     Confirmation"), legacy ``FLAGGED`` status, mixed-case
                     signal enums ("PublicRegistry", "Low")
  v1               — current shape

Payloads with a version newer than ``CURRENT_SCHEMA_VERSION`` are rejected.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from app.core.exceptions import ValidationError
from app.domain.enums import PropertyStatus, Severity, SignalType
from app.schemas.common import CamelModel

CURRENT_SCHEMA_VERSION = 1

RecordT = TypeVar("RecordT", bound=BaseModel)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LifecycleEntry(CamelModel):
    schema_version: int = CURRENT_SCHEMA_VERSION
    status: PropertyStatus
    timestamp: str
    actor: str
    note: str | None = None


class InterestedTenant(CamelModel):
    schema_version: int = CURRENT_SCHEMA_VERSION
    tenant_id: str
    name: str
    email: str
    timestamp: str = Field(default_factory=utc_now_iso)


class RiskSignal(CamelModel):
    schema_version: int = CURRENT_SCHEMA_VERSION
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: SignalType
    severity: Severity
    description: str
    timestamp: str = Field(default_factory=utc_now_iso)


# ---------------------------------------------------------------------------
# Upgrades
# ---------------------------------------------------------------------------

def _version_of(raw: dict[str, Any]) -> int:
    version = raw.get("schema_version", raw.get("schemaVersion", 0))
    if version > CURRENT_SCHEMA_VERSION:
        raise ValidationError(
            f"Record schema version {version} is newer than supported ({CURRENT_SCHEMA_VERSION})"
        )
    return version


def _enum_key(raw: str) -> str:
    """'PublicRegistry' -> 'PUBLIC_REGISTRY', 'Low' -> 'LOW'."""
    return re.sub(r"(?<=[a-z])(?=[A-Z])", "_", raw.strip()).upper()


def upgrade_lifecycle_entry(raw: dict[str, Any]) -> dict[str, Any]:
    if _version_of(raw) == CURRENT_SCHEMA_VERSION:
        return raw
    return {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "status": PropertyStatus.parse(raw["status"]).value,
        "timestamp": raw.get("timestamp") or utc_now_iso(),
        "actor": raw.get("actor") or "Registry",
        "note": raw.get("note"),
    }


def upgrade_interested_tenant(raw: dict[str, Any]) -> dict[str, Any]:
    if _version_of(raw) == CURRENT_SCHEMA_VERSION:
        return raw
    return {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "tenant_id": raw.get("tenant_id") or raw.get("tenantId") or raw["id"],
        "name": raw.get("name", ""),
        "email": raw.get("email", ""),
        "timestamp": raw.get("timestamp") or utc_now_iso(),
    }


def upgrade_risk_signal(raw: dict[str, Any]) -> dict[str, Any]:
    if _version_of(raw) == CURRENT_SCHEMA_VERSION:
        return raw
    return {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "id": raw.get("id") or str(uuid.uuid4()),
        "type": _enum_key(raw["type"]),
        "severity": _enum_key(raw["severity"]),
        "description": raw.get("description", ""),
        "timestamp": raw.get("timestamp") or utc_now_iso(),
    }


def _load(
    raw_items: Iterable[dict[str, Any]] | None,
    upgrade: Callable[[dict[str, Any]], dict[str, Any]],
    model: type[RecordT],
) -> list[RecordT]:
    return [model.model_validate(upgrade(item)) for item in (raw_items or [])]


def load_lifecycle(raw_items: Iterable[dict[str, Any]] | None) -> list[LifecycleEntry]:
    return _load(raw_items, upgrade_lifecycle_entry, LifecycleEntry)


def load_interested(raw_items: Iterable[dict[str, Any]] | None) -> list[InterestedTenant]:
    return _load(raw_items, upgrade_interested_tenant, InterestedTenant)


def load_signals(raw_items: Iterable[dict[str, Any]] | None) -> list[RiskSignal]:
    return _load(raw_items, upgrade_risk_signal, RiskSignal)


def dump_records(records: Iterable[BaseModel]) -> list[dict[str, Any]]:
    """Serialise records for a JSON column (snake_case keys, enum values)."""
    return [record.model_dump(mode="json") for record in records]
