"""Auth Schemas — registration and login payloads with field-level validation.

Invariants:
    - Emails are stripped and lower-cased before reaching services
    - Required registration fields are non-empty after stripping
    - PublicUser never carries password_hash or lockout counters
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v:
        raise ValueError("invalid email address")
    return v


class ChurchRegistration(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1, alias="zipCode")
    description: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    campus_name: str | None = Field(None, alias="campusName")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "address", "city", "state", "zip_code")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty or whitespace")
        return v


class AdminRegistration(BaseModel):
    email: str
    password: str
    first_name: str = Field(min_length=1, alias="firstName")
    last_name: str = Field(min_length=1, alias="lastName")
    phone: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class RegisterRequest(BaseModel):
    church: ChurchRegistration
    admin: AdminRegistration
    skip_payment: bool = Field(False, alias="skipPayment")

    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class PublicUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str | None = None
    role: str
    organization_id: str | None = None
    organization_name: str | None = None
    campus_id: UUID | None = None
    is_active: bool
    onboarding_completed: bool
    theme_preference: str
    last_login: datetime | None = None


class ChurchSummary(BaseModel):
    id: str
    name: str
    trial_ends_at: datetime | None = None
    subscription_status: str


class CampusSummary(BaseModel):
    id: UUID
    name: str


class RegisterResponse(BaseModel):
    success: bool = True
    user: PublicUser
    church: ChurchSummary
    campus: CampusSummary


class LoginResponse(BaseModel):
    success: bool = True
    user: PublicUser
