"""Pathway Schemas — pathway CRUD, enrollment, and analytics payloads.

Invariants:
    - Step order is assigned by position in the request list (1-based), never by the client
    - EnrollRequest.user_ids is non-empty
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StepIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    is_required: bool = True


class StepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    order: int
    is_required: bool


class PathwayCreate(BaseModel):
    church_id: str = Field(min_length=1)
    campus_id: UUID | None = None
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    steps: list[StepIn] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class PathwayUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    campus_id: UUID | None = None
    is_active: bool | None = None
    steps: list[StepIn] | None = None


class PathwayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    church_id: str
    campus_id: UUID | None = None
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    steps: list[StepResponse] = Field(default_factory=list)
    enrolled_count: int = 0
    completed_count: int = 0


class EnrollRequest(BaseModel):
    user_ids: list[UUID] = Field(min_length=1)


class EnrolledMember(BaseModel):
    id: UUID
    name: str | None = None
    email: str


class EnrollmentResponse(BaseModel):
    id: UUID
    pathway_id: UUID
    current_step: int
    started_at: datetime
    completed_at: datetime | None = None
    user: EnrolledMember
    completed_step_ids: list[UUID] = Field(default_factory=list)


class EnrollResult(BaseModel):
    message: str
    enrollments: list[EnrollmentResponse]
    skipped: int


class StepAnalytics(BaseModel):
    id: UUID
    name: str
    order: int
    completions: int
    drop_off_rate: float


class RecentProgress(BaseModel):
    id: UUID
    member_name: str
    current_step: int
    started_at: datetime | None = None
    completed_at: datetime | None = None


class PathwayAnalytics(BaseModel):
    total_enrolled: int
    completed_count: int
    in_progress: int
    completion_rate: int
    step_analytics: list[StepAnalytics]
    recent_progress: list[RecentProgress]
