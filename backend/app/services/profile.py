"""Profile — the caller's own account: profile fields and per-user settings.

Invariants:
    - email is stored lower-case; changing to an email held by another user is a ConflictError
    - church_id in the profile view is the first membership's church (None without memberships)
    - campus selection must name an existing campus
    - moving to a different campus notifies the church admins (never the mover)
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import MembershipRole, ThemePreference
from app.core.errors import ConflictError
from app.models.church_member import ChurchMember
from app.models.user import User
from app.schemas.profile import ProfileResponse, ProfileUpdate
from app.services.churches import get_campus
from app.services.notifications import notify_new_member

logger = logging.getLogger(__name__)


def profile_view(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        phone=user.phone,
        address=user.address,
        city=user.city,
        state=user.state,
        zip_code=user.zip_code,
        country=user.country,
        role=user.role,
        church_id=user.memberships[0].church_id if user.memberships else None,
        created_at=user.created_at,
    )


async def update_profile(
    db: AsyncSession, user: User, payload: ProfileUpdate,
) -> User:
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("email") and changes["email"] != user.email:
        taken = await db.execute(
            select(User.id).where(User.email == changes["email"], User.id != user.id),
        )
        if taken.first() is not None:
            raise ConflictError("Email already in use")
    for key, value in changes.items():
        if value is not None or key != "email":
            setattr(user, key, value)
    await db.commit()
    return user


async def select_campus(db: AsyncSession, user: User, campus_id: UUID) -> User:
    campus = await get_campus(db, campus_id)
    if user.campus_id != campus.id:
        admins = await db.execute(
            select(ChurchMember.user_id).where(
                ChurchMember.church_id == campus.church_id,
                ChurchMember.role == MembershipRole.ADMIN.value,
                ChurchMember.user_id != user.id,
            ),
        )
        for admin_id in admins.scalars().all():
            await notify_new_member(db, admin_id, user.name or user.email, user.id)
    user.campus_id = campus.id
    await db.commit()
    return user


async def set_theme(db: AsyncSession, user: User, theme: ThemePreference) -> User:
    user.theme_preference = theme.value
    await db.commit()
    return user


async def set_onboarding(db: AsyncSession, user: User, completed: bool) -> User:
    user.onboarding_completed = completed
    await db.commit()
    return user


async def set_ai_chat_visible(db: AsyncSession, user: User, visible: bool) -> User:
    user.ai_chat_visible = visible
    await db.commit()
    return user
