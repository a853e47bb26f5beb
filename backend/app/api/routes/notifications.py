"""Notification Routes — the caller's inbox, plus organization announcements.

Invariants:
    - Inbox endpoints act only on the caller's own notifications (403 otherwise)
    - Announcements require ADMINISTER_ORGANIZATION and reach every member of the church
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_principal
from app.core.domain_types import Capability
from app.core.permissions import Principal, ensure_capability
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.notification import (
    Announcement, NotificationList, NotificationResponse,
)
from app.services import churches, notifications

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=NotificationList)
async def list_notifications(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items, unread = await notifications.list_notifications(db, user.id)
    return NotificationList(
        notifications=[NotificationResponse.model_validate(n) for n in items],
        unread_count=unread,
    )


@router.patch("/read-all")
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await notifications.mark_all_read(db, user.id)
    return {"updated": updated}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await notifications.mark_read(db, notification_id, user.id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await notifications.delete_notification(db, notification_id, user.id)


@router.post("/announcements", status_code=status.HTTP_201_CREATED)
async def announce(
    body: Announcement,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    ensure_capability(principal, Capability.ADMINISTER_ORGANIZATION, body.church_id)
    members = await churches.list_members(db, body.church_id)
    created = await notifications.notify_system_announcement(
        db, [m.id for m in members], body.title, body.message, body.link,
    )
    await db.commit()
    return {"sent": len(created)}
