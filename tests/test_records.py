"""Versioned JSON records: legacy payload upgrades and version guards."""

import pytest

from app.core.exceptions import ValidationError
from app.domain.enums import PropertyStatus, Severity, SignalType
from app.schemas.records import (
    CURRENT_SCHEMA_VERSION,
    LifecycleEntry,
    dump_records,
    load_interested,
    load_lifecycle,
    load_signals,
)


def test_legacy_lifecycle_entries_are_upgraded():
    entries = load_lifecycle([
        {"status": "AVAILABLE", "timestamp": "2024-03-01T10:00:00Z", "actor": "Ada", "note": "Initial Registry Enrollment"},
        {"status": "Pending Confirmation", "timestamp": "2024-03-02T10:00:00Z", "actor": "Ada"},
        {"status": "FLAGGED", "timestamp": "2024-03-03T10:00:00Z", "actor": "Admin"},
    ])

    assert [e.status for e in entries] == [
        PropertyStatus.AVAILABLE,
        PropertyStatus.PENDING_CONFIRMATION,
        PropertyStatus.LOCKED,
    ]
    assert all(e.schema_version == CURRENT_SCHEMA_VERSION for e in entries)
    assert entries[1].note is None


def test_legacy_signals_use_mixed_case_enums():
    [signal] = load_signals([
        {"id": "s1", "type": "PublicRegistry", "severity": "Low", "description": "Address mismatch", "timestamp": "t"}
    ])
    assert signal.type == SignalType.PUBLIC_REGISTRY
    assert signal.severity == Severity.LOW
    assert signal.id == "s1"


def test_legacy_interested_tenant_keyed_by_id():
    [tenant] = load_interested([{"id": "t-1", "name": "Tunde", "email": "t@example.com"}])
    assert tenant.tenant_id == "t-1"
    assert tenant.timestamp


def test_current_records_pass_through_and_dump_snake_case():
    entry = LifecycleEntry(status=PropertyStatus.SOLD, timestamp="2025-01-01T00:00:00+00:00", actor="Tunde")
    [dumped] = dump_records([entry])

    assert dumped == {
        "schema_version": 1,
        "status": "SOLD",
        "timestamp": "2025-01-01T00:00:00+00:00",
        "actor": "Tunde",
        "note": None,
    }
    assert load_lifecycle([dumped]) == [entry]


def test_camel_case_current_payload_is_accepted():
    [entry] = load_lifecycle([
        {"schemaVersion": 1, "status": "RENTED", "timestamp": "t", "actor": "Tunde", "note": None}
    ])
    assert entry.status == PropertyStatus.RENTED


def test_newer_schema_version_is_rejected():
    with pytest.raises(ValidationError):
        load_lifecycle([{"schema_version": 2, "status": "AVAILABLE", "timestamp": "t", "actor": "x"}])


def test_empty_or_missing_lists_load_as_empty():
    assert load_lifecycle(None) == []
    assert load_signals([]) == []
