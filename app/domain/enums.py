"""Enumerations shared by the ORM models, schemas and services.

``PropertyStatus`` carries no presentation data itself; labels, severities and
icon keys live in ``STATUS_METADATA`` so the UI never switches on raw strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    LANDLORD = "LANDLORD"
    TENANT = "TENANT"


class ListingType(str, Enum):
    SALE = "Sale"
    RENT = "Rent"


class PropertyStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    SOLD = "SOLD"
    RENTED = "RENTED"
    LOCKED = "LOCKED"

    @classmethod
    def parse(cls, raw: str) -> "PropertyStatus":
        """Accept member names, display labels and the legacy ``FLAGGED`` code."""
        value = raw.strip()
        if value.upper() == "FLAGGED":
            return cls.LOCKED
        normalised = value.upper().replace(" ", "_")
        try:
            return cls(normalised)
        except ValueError:
            raise ValueError(f"Unknown property status '{raw}'") from None


class SignalType(str, Enum):
    IP = "IP"
    DEVICE = "DEVICE"
    DOCUMENT = "DOCUMENT"
    BEHAVIOR = "BEHAVIOR"
    PUBLIC_REGISTRY = "PUBLIC_REGISTRY"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ResolutionAction(str, Enum):
    VERIFY_AND_RESOLVE = "verify-and-resolve"
    DISMISS_ONLY = "dismiss-only"


class RegistryKeyKind(str, Enum):
    UPC = "UPC"
    DOCUMENT_HASH = "DOCUMENT_HASH"


@dataclass(frozen=True)
class StatusMeta:
    label: str
    severity: str  # info | warning | success | danger
    icon_key: str


STATUS_METADATA: dict[PropertyStatus, StatusMeta] = {
    PropertyStatus.AVAILABLE: StatusMeta("Available", "info", "circle-check"),
    PropertyStatus.PENDING_CONFIRMATION: StatusMeta("Pending Confirmation", "warning", "hourglass-half"),
    PropertyStatus.SOLD: StatusMeta("Sold", "success", "handshake"),
    PropertyStatus.RENTED: StatusMeta("Rented", "success", "key"),
    PropertyStatus.LOCKED: StatusMeta("Locked", "danger", "lock"),
}
