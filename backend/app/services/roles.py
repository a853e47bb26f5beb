"""Custom Roles — per-church role CRUD and the system-role upsert.

Invariants:
    - (name, church_id) unique: duplicates raise ConflictError before any write
    - Updating permissions deletes every existing row, then recreates from the payload
    - upsert_system_role never creates a second role with the same name in a church

Design Decisions:
    - Church resolution order for role routes: explicit X-Church-Id, the caller's
      organization, then the caller's first membership
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, ResourceNotFoundError, ValidationFailedError
from app.models.custom_role import CustomRole
from app.models.role_permission import RolePermission
from app.models.user import User
from app.schemas.role import PermissionIn, RoleCreate, RoleUpdate

logger = logging.getLogger(__name__)


def resolve_role_church(user: User | None, header_church_id: str | None) -> str:
    if header_church_id:
        return header_church_id
    if user is None:
        raise ValidationFailedError("Church ID is required", field="church_id")
    if user.organization_id:
        return user.organization_id
    if user.memberships:
        return user.memberships[0].church_id
    raise ValidationFailedError("Church ID is required", field="church_id")


def _permission_rows(permissions: list[PermissionIn]) -> list[RolePermission]:
    return [RolePermission(**p.model_dump()) for p in permissions]


async def _find_by_name(
    db: AsyncSession, church_id: str, name: str,
) -> CustomRole | None:
    result = await db.execute(
        select(CustomRole).where(
            CustomRole.church_id == church_id, CustomRole.name == name,
        ),
    )
    return result.scalar_one_or_none()


async def list_roles(db: AsyncSession, church_id: str) -> list[CustomRole]:
    result = await db.execute(
        select(CustomRole)
        .where(CustomRole.church_id == church_id)
        .order_by(CustomRole.name),
    )
    return list(result.scalars().all())


async def get_role(db: AsyncSession, role_id: UUID) -> CustomRole:
    role = await db.get(CustomRole, role_id)
    if role is None:
        raise ResourceNotFoundError("Role", str(role_id))
    return role


async def create_role(
    db: AsyncSession, church_id: str, payload: RoleCreate,
) -> CustomRole:
    if await _find_by_name(db, church_id, payload.name):
        raise ConflictError("A role with this name already exists")
    role = CustomRole(
        church_id=church_id,
        name=payload.name,
        description=payload.description,
        permissions=_permission_rows(payload.permissions),
    )
    db.add(role)
    await db.commit()
    logger.info("Role created", extra={"organization_id": church_id})
    return role


async def update_role(
    db: AsyncSession, role: CustomRole, payload: RoleUpdate,
) -> CustomRole:
    if payload.name is not None and payload.name != role.name:
        if await _find_by_name(db, role.church_id, payload.name):
            raise ConflictError("A role with this name already exists")
        role.name = payload.name
    if "description" in payload.model_fields_set:
        role.description = payload.description
    if payload.permissions is not None:
        role.permissions.clear()
        await db.flush()
        role.permissions.extend(_permission_rows(payload.permissions))
    await db.commit()
    return role


async def delete_role(db: AsyncSession, role: CustomRole) -> None:
    await db.delete(role)
    await db.commit()


async def upsert_system_role(
    db: AsyncSession, church_id: str, payload: RoleCreate,
) -> CustomRole:
    """Create or overwrite a system role identified by (name, church)."""
    role = await _find_by_name(db, church_id, payload.name)
    if role is None:
        role = CustomRole(
            church_id=church_id,
            name=payload.name,
            description=payload.description,
            is_system_role=True,
            permissions=_permission_rows(payload.permissions),
        )
        db.add(role)
    else:
        role.description = payload.description
        role.is_system_role = True
        role.permissions.clear()
        await db.flush()
        role.permissions.extend(_permission_rows(payload.permissions))
    await db.commit()
    logger.info("System role saved", extra={"organization_id": church_id})
    return role
