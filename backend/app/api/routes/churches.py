"""Church Routes — the caller's organization and its settings."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_principal
from app.core.domain_types import Capability
from app.core.permissions import Principal, ensure_capability
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.church import ChurchResponse, ChurchUpdate
from app.services import churches

router = APIRouter(prefix="/api/v1/churches", tags=["churches"])


@router.get("", response_model=list[ChurchResponse])
async def list_churches(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's church as a one-element list (empty without an organization)."""
    return await churches.list_churches_for(db, user)


@router.patch("/{church_id}", response_model=ChurchResponse)
async def update_church(
    church_id: str,
    body: ChurchUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    ensure_capability(principal, Capability.ADMINISTER_ORGANIZATION, church_id)
    church = await churches.get_church(db, church_id)
    return await churches.update_church(db, church, body)
