"""Role Schemas — custom roles with per-resource CRUD flags."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PermissionIn(BaseModel):
    resource: str = Field(min_length=1, max_length=100)
    can_read: bool = False
    can_create: bool = False
    can_update: bool = False
    can_delete: bool = False


class PermissionResponse(PermissionIn):
    model_config = ConfigDict(from_attributes=True)

    id: UUID


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    permissions: list[PermissionIn] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class RoleUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    permissions: list[PermissionIn] | None = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    church_id: str
    name: str
    description: str | None = None
    is_system_role: bool
    permissions: list[PermissionResponse] = Field(default_factory=list)
