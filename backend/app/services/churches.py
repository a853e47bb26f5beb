"""Churches & Campuses — organization settings, campus CRUD, and member listing.

Invariants:
    - A campus name is unique within its church (409 on duplicate, checked before insert)
    - Listings are scoped to churches the caller belongs to (organization or membership)
    - Lookups by id raise ResourceNotFoundError, never return None to routes
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, ResourceNotFoundError
from app.models.campus import Campus
from app.models.church import Church
from app.models.church_member import ChurchMember
from app.models.user import User
from app.schemas.church import CampusCreate, CampusUpdate, ChurchUpdate

logger = logging.getLogger(__name__)


def church_ids_of(user: User) -> list[str]:
    """Organization first, then every membership church, without duplicates."""
    ids: list[str] = []
    if user.organization_id:
        ids.append(user.organization_id)
    for membership in user.memberships:
        if membership.church_id not in ids:
            ids.append(membership.church_id)
    return ids


async def get_church(db: AsyncSession, church_id: str) -> Church:
    church = await db.get(Church, church_id)
    if church is None:
        raise ResourceNotFoundError("Church", church_id)
    return church


async def list_churches_for(db: AsyncSession, user: User) -> list[Church]:
    if not user.organization_id:
        return []
    church = await db.get(Church, user.organization_id)
    return [church] if church else []


async def update_church(
    db: AsyncSession, church: Church, payload: ChurchUpdate,
) -> Church:
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(church, key, value)
    await db.commit()
    await db.refresh(church)
    return church


async def list_campuses_for(db: AsyncSession, user: User) -> list[Campus]:
    church_ids = church_ids_of(user)
    if not church_ids:
        raise ResourceNotFoundError("Church", f"user {user.id}")
    result = await db.execute(
        select(Campus)
        .where(Campus.church_id.in_(church_ids))
        .order_by(Campus.name),
    )
    return list(result.scalars().all())


async def _ensure_unique_campus_name(
    db: AsyncSession, church_id: str, name: str, exclude: UUID | None = None,
) -> None:
    stmt = select(Campus.id).where(
        Campus.church_id == church_id, Campus.name == name,
    )
    if exclude is not None:
        stmt = stmt.where(Campus.id != exclude)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError("A campus with this name already exists")


async def create_campus(db: AsyncSession, payload: CampusCreate) -> Campus:
    await get_church(db, payload.church_id)
    await _ensure_unique_campus_name(db, payload.church_id, payload.name)
    campus = Campus(**payload.model_dump(), is_active=True)
    db.add(campus)
    await db.commit()
    await db.refresh(campus)
    logger.info(
        "Campus created", extra={"organization_id": payload.church_id},
    )
    return campus


async def get_campus(db: AsyncSession, campus_id: UUID) -> Campus:
    campus = await db.get(Campus, campus_id)
    if campus is None:
        raise ResourceNotFoundError("Campus", str(campus_id))
    return campus


async def update_campus(
    db: AsyncSession, campus: Campus, payload: CampusUpdate,
) -> Campus:
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] != campus.name:
        await _ensure_unique_campus_name(
            db, campus.church_id, changes["name"], exclude=campus.id,
        )
    for key, value in changes.items():
        setattr(campus, key, value)
    await db.commit()
    await db.refresh(campus)
    return campus


async def delete_campus(db: AsyncSession, campus: Campus) -> None:
    await db.delete(campus)
    await db.commit()
    logger.info("Campus deleted", extra={"organization_id": campus.church_id})


async def list_members(db: AsyncSession, church_id: str) -> list[User]:
    """Users whose organization is church_id or who hold a membership in it."""
    member_ids = select(ChurchMember.user_id).where(ChurchMember.church_id == church_id)
    result = await db.execute(
        select(User)
        .where((User.organization_id == church_id) | User.id.in_(member_ids))
        .order_by(User.name),
    )
    return list(result.scalars().all())
