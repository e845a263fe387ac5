"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  user.py          — Registry users (admin / landlord / tenant), soft states only
  property.py      — Properties with lifecycle log, risk signals, interested tenants
  complaint.py     — Complaints / disputes filed against properties or users
  audit.py         — Immutable audit log (never updated or deleted)
  registry_key.py  — Store-backed UPC / document-hash uniqueness index
  enums.py         — Status, role and signal enumerations + status metadata table
  mixins.py        — Shared TimestampMixin
"""

from app.domain.audit import AuditLog
from app.domain.complaint import Complaint
from app.domain.property import Property
from app.domain.registry_key import RegistryKey
from app.domain.user import User

__all__ = [
    "AuditLog",
    "Complaint",
    "Property",
    "RegistryKey",
    "User",
]
