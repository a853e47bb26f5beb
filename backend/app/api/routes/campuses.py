"""Campus Routes — campus CRUD scoped to the caller's churches.

Invariants:
    - Writes require MANAGE_CAMPUSES over the campus's church
    - Duplicate name within a church is a 409
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_principal
from app.core.domain_types import Capability
from app.core.permissions import Principal, ensure_capability
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.church import CampusCreate, CampusResponse, CampusUpdate
from app.services import churches

router = APIRouter(prefix="/api/v1/campuses", tags=["campuses"])


@router.get("", response_model=list[CampusResponse])
async def list_campuses(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await churches.list_campuses_for(db, user)


@router.post(
    "", response_model=CampusResponse, status_code=status.HTTP_201_CREATED,
)
async def create_campus(
    body: CampusCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    ensure_capability(principal, Capability.MANAGE_CAMPUSES, body.church_id)
    return await churches.create_campus(db, body)


@router.get("/{campus_id}", response_model=CampusResponse)
async def get_campus(
    campus_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await churches.get_campus(db, campus_id)


@router.patch("/{campus_id}", response_model=CampusResponse)
async def update_campus(
    campus_id: UUID,
    body: CampusUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    campus = await churches.get_campus(db, campus_id)
    ensure_capability(principal, Capability.MANAGE_CAMPUSES, campus.church_id)
    return await churches.update_campus(db, campus, body)


@router.delete("/{campus_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_campus(
    campus_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    campus = await churches.get_campus(db, campus_id)
    ensure_capability(principal, Capability.MANAGE_CAMPUSES, campus.church_id)
    await churches.delete_campus(db, campus)
