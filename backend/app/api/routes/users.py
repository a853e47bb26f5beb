"""User Directory Routes — members of one church, ordered by name."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_principal
from app.core.domain_types import Capability
from app.core.permissions import Principal, ensure_capability
from app.infrastructure.database import get_db
from app.schemas.church import MemberSummary
from app.services import churches

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=list[MemberSummary])
async def list_users(
    church_id: str = Query(..., alias="churchId", min_length=1),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    ensure_capability(principal, Capability.VIEW_MEMBERS, church_id)
    return await churches.list_members(db, church_id)
