"""Risk gate — flag / critical classification and action permissions.

Fraud score and lock state are independent signals: locking is a manual
action layered on top of the score, never derived from it, and unlocking
leaves score and signals untouched.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Union

from app.core.config import settings
from app.domain.enums import PropertyStatus, UserRole

if TYPE_CHECKING:
    from app.domain.property import Property
    from app.domain.user import User


def _aware(moment: datetime) -> datetime:
    """SQLite hands back naive datetimes; the store only ever holds UTC."""
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def is_user_flagged(user: "User") -> bool:
    return bool(user.is_banned) or (user.fraud_score or 0) > settings.user_flag_threshold


def is_property_flagged(prop: "Property") -> bool:
    """Shown on the fraud desk: score above threshold or any recorded signal."""
    return (prop.fraud_score or 0) > settings.property_flag_threshold or len(prop.signals or []) > 0


def is_critical(prop: "Property") -> bool:
    return (prop.fraud_score or 0) > settings.critical_risk_threshold


def is_flagged(entity: Union["User", "Property"]) -> bool:
    from app.domain.user import User

    return is_user_flagged(entity) if isinstance(entity, User) else is_property_flagged(entity)


def compute_critical_risk(entity: Union["User", "Property"]) -> bool:
    return (entity.fraud_score or 0) > settings.critical_risk_threshold


# ---------------------------------------------------------------------------
# Standing
# ---------------------------------------------------------------------------

def is_suspended(user: "User", now: datetime | None = None) -> bool:
    if user.suspension_until is None:
        return False
    return _aware(user.suspension_until) > (now or datetime.now(timezone.utc))


def can_act(user: "User", now: datetime | None = None) -> bool:
    """Banned or currently suspended users may not trigger registry actions."""
    return not user.is_banned and not is_suspended(user, now)


def is_admin(user: "User | None") -> bool:
    return user is not None and user.role == UserRole.ADMIN


def is_owner(user: "User | None", prop: "Property") -> bool:
    return user is not None and user.id == prop.owner_id


# ---------------------------------------------------------------------------
# Action gates
# ---------------------------------------------------------------------------

def is_publicly_listed(prop: "Property") -> bool:
    return prop.status != PropertyStatus.LOCKED


def can_finalize_deal(prop: "Property") -> bool:
    return prop.status != PropertyStatus.LOCKED and not is_critical(prop)


def can_lock(user: "User | None", prop: "Property") -> bool:
    """Owner self-flag or admin."""
    return is_admin(user) or is_owner(user, prop)


def can_unlock(user: "User | None") -> bool:
    return is_admin(user)


# ---------------------------------------------------------------------------
# Suspension arithmetic
# ---------------------------------------------------------------------------

def add_months(moment: datetime, months: int) -> datetime:
    """Calendar-month addition; an out-of-range day rolls into the next month.

    2025-01-15 + 3 → 2025-04-15, 2025-01-31 + 1 → 2025-03-03.
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    overflow = max(0, moment.day - last_day)
    return moment.replace(year=year, month=month, day=min(moment.day, last_day)) + timedelta(days=overflow)


def suspension_deadline(now: datetime | None = None) -> datetime:
    return add_months(now or datetime.now(timezone.utc), settings.suspension_months)
