"""Lifecycle engine: transitions, notes and the lifecycle-log invariant."""

from datetime import datetime, timezone

import pytest

from app.core.config import settings
from app.core.exceptions import IllegalTransitionError
from app.domain.enums import ListingType, PropertyStatus
from app.domain.property import Property
from app.schemas.records import dump_records, load_lifecycle
from app.services import lifecycle


def _property(listing_type=ListingType.SALE, status=PropertyStatus.AVAILABLE) -> Property:
    return Property(
        id="prop-1",
        listing_type=listing_type,
        status=status,
        fraud_score=0,
        signals=[],
        lifecycle_log=dump_records([lifecycle.enrollment_entry("Ada Obi")]),
    )


def _statuses(prop: Property) -> list[PropertyStatus]:
    return [entry.status for entry in load_lifecycle(prop.lifecycle_log)]


def test_enrollment_entry_is_available_with_note():
    entry = lifecycle.enrollment_entry("Ada Obi", datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc))
    assert entry.status == PropertyStatus.AVAILABLE
    assert entry.note == "Initial Registry Enrollment"
    assert entry.actor == "Ada Obi"
    assert entry.timestamp == "2025-01-15T09:30:00+00:00"


def test_transition_appends_entry_and_mirrors_status():
    prop = _property()
    changed = lifecycle.transition(prop, PropertyStatus.PENDING_CONFIRMATION, "Ada Obi")

    assert changed is True
    assert prop.status == PropertyStatus.PENDING_CONFIRMATION
    log = load_lifecycle(prop.lifecycle_log)
    assert len(log) == 2
    assert log[-1].status == prop.status
    assert log[-1].note == "Deal initiated by Owner"
    assert log[-1].actor == "Ada Obi"


def test_same_status_appends_nothing():
    prop = _property()
    before = list(prop.lifecycle_log)

    assert lifecycle.transition(prop, PropertyStatus.AVAILABLE, "Ada Obi") is False
    assert prop.lifecycle_log == before


def test_log_is_only_extended_never_rewritten():
    prop = _property()
    lifecycle.transition(prop, PropertyStatus.LOCKED, "Admin")
    first_two = list(prop.lifecycle_log)
    lifecycle.transition(prop, PropertyStatus.AVAILABLE, "Admin")

    assert prop.lifecycle_log[:2] == first_two
    assert _statuses(prop) == [PropertyStatus.AVAILABLE, PropertyStatus.LOCKED, PropertyStatus.AVAILABLE]


@pytest.mark.parametrize(
    "status, note",
    [
        (PropertyStatus.LOCKED, "Fraud or Dispute Security Lock"),
        (PropertyStatus.PENDING_CONFIRMATION, "Deal initiated by Owner"),
        (PropertyStatus.SOLD, "Deal finalized and verified by Tenant"),
        (PropertyStatus.RENTED, "Deal finalized and verified by Tenant"),
        (PropertyStatus.AVAILABLE, "Protocol State Transition"),
    ],
)
def test_transition_note_depends_on_destination(status, note):
    assert lifecycle.transition_note(status) == note


@pytest.mark.parametrize(
    "listing_type, expected",
    [(ListingType.SALE, PropertyStatus.SOLD), (ListingType.RENT, PropertyStatus.RENTED)],
)
def test_verify_deal_destination(listing_type, expected):
    prop = _property(listing_type=listing_type, status=PropertyStatus.PENDING_CONFIRMATION)
    assert lifecycle.verify_deal(prop, "Tunde Bello") == expected
    assert prop.status == expected
    assert load_lifecycle(prop.lifecycle_log)[-1].status == expected


def test_permissive_engine_allows_leaving_terminal_states():
    prop = _property(status=PropertyStatus.SOLD)
    assert lifecycle.transition(prop, PropertyStatus.AVAILABLE, "Admin") is True
    assert prop.status == PropertyStatus.AVAILABLE


def test_enforced_table_rejects_illegal_transition(monkeypatch):
    monkeypatch.setattr(settings, "enforce_transition_table", True)
    prop = _property(status=PropertyStatus.SOLD)
    before = list(prop.lifecycle_log)

    with pytest.raises(IllegalTransitionError):
        lifecycle.transition(prop, PropertyStatus.PENDING_CONFIRMATION, "Admin")
    assert prop.status == PropertyStatus.SOLD
    assert prop.lifecycle_log == before


@pytest.mark.parametrize(
    "current", [PropertyStatus.PENDING_CONFIRMATION, PropertyStatus.SOLD, PropertyStatus.RENTED, PropertyStatus.LOCKED]
)
def test_enforced_table_always_allows_return_to_available(monkeypatch, current):
    monkeypatch.setattr(settings, "enforce_transition_table", True)
    prop = _property(status=current)
    assert lifecycle.transition(prop, PropertyStatus.AVAILABLE, "Admin") is True
    assert prop.status == PropertyStatus.AVAILABLE


def test_actor_name_falls_back_to_system_sentinel():
    assert lifecycle.actor_name(None) == "System Registry"
