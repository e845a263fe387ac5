"""User Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from pydantic import Field

from app.domain.enums import UserRole
from app.schemas.common import CamelModel

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

class UserCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(pattern=_EMAIL_PATTERN, max_length=255)
    role: UserRole = UserRole.TENANT
    phone: str | None = None

class UserUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = None
    profile_image: str | None = None

class UserRiskUpdate(CamelModel):
    fraud_score: int = Field(ge=0, le=100, description="External fraud score, 0-100.")

class KycIdentityRequest(CamelModel):
    id_document: str = Field(min_length=1, description="Base64 government ID image.")

class KycBiometricRequest(CamelModel):
    id_document: str = Field(min_length=1, description="Base64 government ID image.")
    face_capture: str = Field(min_length=1, description="Base64 live face capture.")

class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    phone: str | None = None
    profile_image: str | None = None
    email_verified: bool
    phone_verified: bool
    kyc_verified: bool
    kyc_step: int
    is_banned: bool
    suspension_until: datetime | None = None
    fraud_score: int
    is_flagged: bool = False
    version: int
    created_at: datetime
    updated_at: datetime

class KycResultOut(CamelModel):
    verified: bool
    confidence: float
    reason: str
    user: UserOut
