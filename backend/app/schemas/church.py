"""Church & Campus Schemas — organization settings and campus CRUD payloads."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChurchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    observes_church_membership: bool
    subscription_status: str
    trial_ends_at: datetime | None = None


class ChurchUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    observes_church_membership: bool | None = None


class CampusCreate(BaseModel):
    church_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class CampusUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    is_active: bool | None = None


class CampusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    church_id: str
    name: str
    description: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    is_active: bool


class MemberSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    email: str
    role: str
    campus_id: UUID | None = None
    is_active: bool
