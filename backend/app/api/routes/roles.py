"""Role Routes — custom per-church roles.

Invariants:
    - Every endpoint requires MANAGE_ROLES over the resolved church
    - Church resolution: X-Church-Id header, caller's organization, first membership
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_principal
from app.core.domain_types import Capability
from app.core.permissions import Principal, ensure_capability
from app.infrastructure.database import get_db
from app.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from app.services import accounts, roles

router = APIRouter(prefix="/api/v1/roles", tags=["roles"])


async def _church_for(
    principal: Principal = Depends(get_principal),
    x_church_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> str:
    user = None
    if not x_church_id and principal.user_id is not None:
        user = await accounts.get_user(db, principal.user_id)
    church_id = roles.resolve_role_church(user, x_church_id)
    ensure_capability(principal, Capability.MANAGE_ROLES, church_id)
    return church_id


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    church_id: str = Depends(_church_for),
    db: AsyncSession = Depends(get_db),
):
    return await roles.list_roles(db, church_id)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    body: RoleCreate,
    church_id: str = Depends(_church_for),
    db: AsyncSession = Depends(get_db),
):
    return await roles.create_role(db, church_id, body)


@router.post("/system", response_model=RoleResponse)
async def upsert_system_role(
    body: RoleCreate,
    church_id: str = Depends(_church_for),
    db: AsyncSession = Depends(get_db),
):
    return await roles.upsert_system_role(db, church_id, body)


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: UUID,
    body: RoleUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    role = await roles.get_role(db, role_id)
    ensure_capability(principal, Capability.MANAGE_ROLES, role.church_id)
    return await roles.update_role(db, role, body)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    role = await roles.get_role(db, role_id)
    ensure_capability(principal, Capability.MANAGE_ROLES, role.church_id)
    await roles.delete_role(db, role)
