"""SQLAlchemy ORM model for the registry uniqueness index.

One row per reserved UPC or ownership-document hash. The unique constraint on
(kind, value) is the dedup authority shared by every API instance.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.enums import RegistryKeyKind


class RegistryKey(Base):
    __tablename__ = "registry_keys"
    __table_args__ = (UniqueConstraint("kind", "value", name="uq_registry_keys_kind_value"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[RegistryKeyKind] = mapped_column(
        Enum(RegistryKeyKind, native_enum=False, length=20), nullable=False
    )
    value: Mapped[str] = mapped_column(String(128), nullable=False)
    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )
