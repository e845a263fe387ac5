"""Complaint, audit-log and admin dashboard schemas."""


from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field

from app.domain.enums import ResolutionAction
from app.schemas.common import CamelModel

class ComplaintCreate(CamelModel):
    message: str = Field(min_length=1, max_length=5000)
    property_id: str | None = None

class ResolveRequest(CamelModel):
    action: ResolutionAction

class ComplaintOut(CamelModel):
    id: str
    user_id: str
    user_name: str | None = None
    property_id: str | None = None
    message: str
    resolved: bool
    created_at: datetime

class AuditLogOut(CamelModel):
    id: str
    actor_id: str | None = None
    action: str
    target_id: str | None = None
    metadata: Any = Field(default=None, validation_alias=AliasChoices("meta", "metadata"))
    created_at: datetime

class DashboardStats(CamelModel):
    users: int
    flagged_users: int
    properties: int
    locked_properties: int
    open_complaints: int
