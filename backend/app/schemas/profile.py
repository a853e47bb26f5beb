"""Profile Schemas — the caller's own account settings."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.domain_types import ThemePreference


class ProfileResponse(BaseModel):
    id: UUID
    email: str
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    role: str
    church_id: str | None = None
    created_at: datetime


class ProfileUpdate(BaseModel):
    name: str | None = Field(None, max_length=200)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("invalid email address")
        return v


class CampusSelection(BaseModel):
    campus_id: UUID


class ThemeUpdate(BaseModel):
    theme: ThemePreference


class OnboardingUpdate(BaseModel):
    completed: bool = True


class AiChatSettings(BaseModel):
    ai_chat_visible: bool


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)
