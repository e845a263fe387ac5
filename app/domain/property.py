"""SQLAlchemy ORM model for registered properties.

The JSON columns hold versioned records (see ``app.schemas.records``):
  lifecycle_log       — append-only LifecycleEntry list; last entry mirrors ``status``
  interested_tenants  — InterestedTenant list, at most one entry per tenant
  signals             — RiskSignal list recorded by external scorers / admins
Always assign a new list to these attributes; in-place mutation is not tracked.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import Enum, ForeignKey, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.enums import ListingType, PropertyStatus
from app.domain.mixins import TimestampMixin


class Property(Base, TimestampMixin):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    listing_type: Mapped[ListingType] = mapped_column(
        "type", Enum(ListingType, native_enum=False, length=10), nullable=False, index=True
    )
    property_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    units: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    latitude: Mapped[Optional[Decimal]] = mapped_column(Numeric(9, 6), nullable=True)
    longitude: Mapped[Optional[Decimal]] = mapped_column(Numeric(9, 6), nullable=True)

    status: Mapped[PropertyStatus] = mapped_column(
        Enum(PropertyStatus, native_enum=False, length=30),
        default=PropertyStatus.AVAILABLE,
        nullable=False,
        index=True,
    )
    upc: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    document_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    # Risk
    fraud_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    signals: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    interested_tenants: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list, nullable=False
    )
    tenant_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True, index=True
    )
    lifecycle_log: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list, nullable=False
    )

    # Optimistic concurrency: every flush is UPDATE ... WHERE version = :loaded
    version: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")

    owner: Mapped["User"] = relationship(foreign_keys=[owner_id], lazy="joined")

    __mapper_args__ = {"version_id_col": version}

    @property
    def owner_name(self) -> Optional[str]:
        return self.owner.name if self.owner is not None else None
