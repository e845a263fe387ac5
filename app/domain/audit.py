"""SQLAlchemy ORM model for the privileged-action audit log."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Who
    actor_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)

    # What
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    target_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    # "metadata" is reserved on declarative classes
    meta: Mapped[Optional[Any]] = mapped_column("metadata", JSON, nullable=True)

    # When (no updated_at / deleted_at — audit rows are immutable)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
