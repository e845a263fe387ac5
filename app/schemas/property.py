"""Property Pydantic schemas (request DTOs and response models)."""


from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, Field, field_validator

from app.domain.enums import ListingType, PropertyStatus, Severity, SignalType
from app.schemas.common import CamelModel
from app.schemas.records import (
    InterestedTenant,
    LifecycleEntry,
    RiskSignal,
    upgrade_interested_tenant,
    upgrade_lifecycle_entry,
    upgrade_risk_signal,
)

class PropertyCreate(CamelModel):
    """Landlord submission. Rejected here, before any store write, when incomplete."""

    title: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1, max_length=500)
    description: str | None = None
    price: Decimal = Field(gt=0)
    listing_type: ListingType = Field(validation_alias=AliasChoices("type", "listingType", "listing_type"))
    property_type: str | None = None
    units: int = Field(default=1, ge=1)
    latitude: Decimal | None = Field(default=None, ge=-90, le=90)
    longitude: Decimal | None = Field(default=None, ge=-180, le=180)
    images: list[str] = Field(default_factory=list, validate_default=True)
    ownership_document: str | None = Field(
        default=None, validate_default=True, description="Base64 deed / title document."
    )
    share_consent: bool = Field(default=False, validate_default=True)

    @field_validator("images")
    @classmethod
    def _require_images(cls, value: list[str]) -> list[str]:
        if not [img for img in value if img]:
            raise ValueError("Please ensure images and a verified ownership document are uploaded.")
        return value

    @field_validator("ownership_document")
    @classmethod
    def _require_document(cls, value: str | None) -> str:
        if not value:
            raise ValueError("Please ensure images and a verified ownership document are uploaded.")
        return value

    @field_validator("share_consent")
    @classmethod
    def _require_consent(cls, value: bool) -> bool:
        if not value:
            raise ValueError("You must consent to sharing the document for third party verification.")
        return value

class StatusChangeRequest(CamelModel):
    status: PropertyStatus

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return PropertyStatus.parse(value) if isinstance(value, str) else value

class AssignTenantRequest(CamelModel):
    tenant_id: str = Field(min_length=1)

class SignalCreate(CamelModel):
    type: SignalType
    severity: Severity
    description: str = Field(min_length=1)
    fraud_score: int | None = Field(default=None, ge=0, le=100)

class PropertyOut(CamelModel):
    id: str
    owner_id: str
    owner_name: str | None = None
    title: str
    address: str
    description: str | None = None
    price: float
    listing_type: ListingType = Field(
        validation_alias=AliasChoices("listing_type", "type"), serialization_alias="type"
    )
    property_type: str | None = None
    units: int
    latitude: float | None = None
    longitude: float | None = None
    status: PropertyStatus
    upc: str
    document_hash: str | None = None
    fraud_score: int
    signals: list[RiskSignal] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    interested_tenants: list[InterestedTenant] = Field(default_factory=list)
    tenant_id: str | None = None
    lifecycle_log: list[LifecycleEntry] = Field(default_factory=list)
    is_flagged: bool = False
    is_critical: bool = False
    version: int
    created_at: datetime
    updated_at: datetime

    @field_validator("lifecycle_log", mode="before")
    @classmethod
    def _upgrade_lifecycle(cls, value):
        return [upgrade_lifecycle_entry(v) if isinstance(v, dict) else v for v in value or []]

    @field_validator("interested_tenants", mode="before")
    @classmethod
    def _upgrade_interested(cls, value):
        return [upgrade_interested_tenant(v) if isinstance(v, dict) else v for v in value or []]

    @field_validator("signals", mode="before")
    @classmethod
    def _upgrade_signals(cls, value):
        return [upgrade_risk_signal(v) if isinstance(v, dict) else v for v in value or []]
