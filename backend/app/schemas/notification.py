"""Notification Schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    title: str
    message: str
    link: str | None = None
    read: bool
    created_at: datetime


class NotificationList(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class Announcement(BaseModel):
    church_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    link: str | None = None
