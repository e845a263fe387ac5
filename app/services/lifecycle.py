"""Lifecycle engine — property status transitions and the append-only lifecycle log.

The engine is permissive: any status change is accepted and logged, including
moves out of SOLD / RENTED / LOCKED. Setting ``ENFORCE_TRANSITION_TABLE``
restricts changes to ``ALLOWED_TRANSITIONS``.

Invariant kept by every function here: ``lifecycle_log[-1].status == status``.
The log is only ever replaced by ``old + [entry]``, never edited.

No SQLAlchemy / FastAPI here; callers persist the mutated entity.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from app.core.config import settings
from app.core.exceptions import IllegalTransitionError
from app.domain.enums import ListingType, PropertyStatus
from app.schemas.records import LifecycleEntry, dump_records, load_lifecycle

if TYPE_CHECKING:
    from app.domain.property import Property
    from app.domain.user import User

logger = logging.getLogger(__name__)

ENROLLMENT_NOTE = "Initial Registry Enrollment"

_NOTES: dict[PropertyStatus, str] = {
    PropertyStatus.LOCKED: "Fraud or Dispute Security Lock",
    PropertyStatus.PENDING_CONFIRMATION: "Deal initiated by Owner",
    PropertyStatus.SOLD: "Deal finalized and verified by Tenant",
    PropertyStatus.RENTED: "Deal finalized and verified by Tenant",
}
_DEFAULT_NOTE = "Protocol State Transition"

ALLOWED_TRANSITIONS: dict[PropertyStatus, frozenset[PropertyStatus]] = {
    PropertyStatus.AVAILABLE: frozenset(
        {PropertyStatus.PENDING_CONFIRMATION, PropertyStatus.LOCKED}
    ),
    PropertyStatus.PENDING_CONFIRMATION: frozenset(
        {PropertyStatus.AVAILABLE, PropertyStatus.SOLD, PropertyStatus.RENTED, PropertyStatus.LOCKED}
    ),
    PropertyStatus.SOLD: frozenset({PropertyStatus.AVAILABLE, PropertyStatus.LOCKED}),
    PropertyStatus.RENTED: frozenset({PropertyStatus.AVAILABLE, PropertyStatus.LOCKED}),
    PropertyStatus.LOCKED: frozenset({PropertyStatus.AVAILABLE}),
}


def transition_note(new_status: PropertyStatus) -> str:
    """Note text depends on the destination only."""
    return _NOTES.get(PropertyStatus(new_status), _DEFAULT_NOTE)


def actor_name(user: "User | None") -> str:
    return user.name if user is not None else settings.system_actor


def _timestamp(now: datetime | None) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


def enrollment_entry(actor: str, now: datetime | None = None) -> LifecycleEntry:
    return LifecycleEntry(
        status=PropertyStatus.AVAILABLE,
        timestamp=_timestamp(now),
        actor=actor,
        note=ENROLLMENT_NOTE,
    )


def is_allowed(current: PropertyStatus, new_status: PropertyStatus) -> bool:
    return new_status in ALLOWED_TRANSITIONS.get(PropertyStatus(current), frozenset())


def transition(
    prop: "Property",
    new_status: PropertyStatus,
    actor: str,
    now: datetime | None = None,
) -> bool:
    """Move ``prop`` to ``new_status`` and append a lifecycle entry.

    Returns False (and appends nothing) when the status is unchanged.
    """
    new_status = PropertyStatus(new_status)
    current = PropertyStatus(prop.status)
    if new_status == current:
        return False
    if settings.enforce_transition_table and not is_allowed(current, new_status):
        raise IllegalTransitionError(current.value, new_status.value)

    entry = LifecycleEntry(
        status=new_status,
        timestamp=_timestamp(now),
        actor=actor,
        note=transition_note(new_status),
    )
    prop.lifecycle_log = dump_records([*load_lifecycle(prop.lifecycle_log), entry])
    prop.status = new_status
    logger.info("Property %s: %s -> %s by %s", prop.id, current.value, new_status.value, actor)
    return True


def deal_destination(listing_type: ListingType) -> PropertyStatus:
    return PropertyStatus.SOLD if ListingType(listing_type) == ListingType.SALE else PropertyStatus.RENTED


def verify_deal(prop: "Property", actor: str, now: datetime | None = None) -> PropertyStatus:
    """Finalize the deal: SOLD for sale listings, RENTED otherwise."""
    destination = deal_destination(prop.listing_type)
    transition(prop, destination, actor, now)
    return destination
