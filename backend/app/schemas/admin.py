"""Admin Schemas — responses of the organization identity routine."""

from pydantic import BaseModel


class ReassignmentResponse(BaseModel):
    status: str
    old_id: str | None = None
    new_id: str | None = None
    users: int = 0
    memberships: int = 0
    campuses: int = 0
    reason: str | None = None


class DeletionResponse(BaseModel):
    status: str = "deleted"
    email: str
    memberships: int
    campuses: int
