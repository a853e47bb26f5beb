"""Notifications — creation helpers and the owner-scoped inbox operations.

Invariants:
    - Creation helpers add and flush but never commit: the caller's unit of work owns the commit
    - Inbox operations touch only notifications owned by the caller; another user's row is a
      ForbiddenError, a missing row a ResourceNotFoundError
    - Listing is newest first

Design Decisions:
    - Typed helpers (notify_*) keep titles, messages and links in one place
"""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import NotificationType
from app.core.errors import ForbiddenError, ResourceNotFoundError
from app.models.notification import Notification

logger = logging.getLogger(__name__)


async def create_notification(
    db: AsyncSession,
    user_id: UUID,
    type: NotificationType,
    title: str,
    message: str,
    link: str | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id, type=type.value, title=title, message=message, link=link,
    )
    db.add(notification)
    await db.flush()
    return notification


async def create_bulk_notifications(
    db: AsyncSession,
    user_ids: list[UUID],
    type: NotificationType,
    title: str,
    message: str,
    link: str | None = None,
) -> list[Notification]:
    created = [
        Notification(
            user_id=user_id, type=type.value, title=title, message=message, link=link,
        )
        for user_id in user_ids
    ]
    db.add_all(created)
    await db.flush()
    logger.info(
        "Notifications created", extra={"counts": {"notifications": len(created)}},
    )
    return created


async def notify_new_member(
    db: AsyncSession, user_id: UUID, member_name: str, member_id: UUID,
) -> Notification:
    return await create_notification(
        db, user_id, NotificationType.MEMBER,
        "New member joined",
        f"{member_name} has been added to your campus",
        f"/dashboard/people/{member_id}",
    )


async def notify_pathway_completion(
    db: AsyncSession,
    user_id: UUID,
    member_name: str,
    pathway_name: str,
    member_id: UUID,
) -> Notification:
    return await create_notification(
        db, user_id, NotificationType.PATHWAY,
        "Pathway milestone reached",
        f'{member_name} completed "{pathway_name}"',
        f"/dashboard/people/{member_id}",
    )


async def notify_system_announcement(
    db: AsyncSession,
    user_ids: list[UUID],
    title: str,
    message: str,
    link: str | None = None,
) -> list[Notification]:
    return await create_bulk_notifications(
        db, user_ids, NotificationType.ANNOUNCEMENT, title, message, link,
    )


# ─── Inbox ──────────────────────────────────────────────────────

async def list_notifications(
    db: AsyncSession, user_id: UUID,
) -> tuple[list[Notification], int]:
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc()),
    )
    unread = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id, Notification.read.is_(False),
        ),
    )
    return list(result.scalars().all()), unread.scalar_one()


async def _owned_notification(
    db: AsyncSession, notification_id: UUID, user_id: UUID,
) -> Notification:
    notification = await db.get(Notification, notification_id)
    if notification is None:
        raise ResourceNotFoundError("Notification", str(notification_id))
    if notification.user_id != user_id:
        raise ForbiddenError("Notification belongs to another user")
    return notification


async def mark_read(
    db: AsyncSession, notification_id: UUID, user_id: UUID,
) -> Notification:
    notification = await _owned_notification(db, notification_id, user_id)
    notification.read = True
    await db.commit()
    return notification


async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
        .execution_options(synchronize_session=False),
    )
    await db.commit()
    return result.rowcount


async def delete_notification(
    db: AsyncSession, notification_id: UUID, user_id: UUID,
) -> None:
    notification = await _owned_notification(db, notification_id, user_id)
    await db.delete(notification)
    await db.commit()
