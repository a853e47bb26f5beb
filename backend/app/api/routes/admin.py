"""Admin Routes — organization identifier repair and administrative account deletion.

Invariants:
    - Non-operators are checked for ADMINISTER_ORGANIZATION over their own organization
      BEFORE the email is looked up: callers without it cannot learn which emails exist
    - Both operations then require the target user to belong to the caller's organization;
      a user without an organization is "nothing to do" for reassignment
    - Unknown email is a 404 every time (once the caller is authorized), with no side effects
    - Transaction failures and generation exhaustion surface as 500 with the failure message

Design Decisions:
    - email as query parameter: both endpoints act on exactly one account, no body needed
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_principal
from app.config import get_settings
from app.core.domain_types import Capability
from app.core.permissions import Principal, ensure_capability
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.admin import DeletionResponse, ReassignmentResponse
from app.services.organization_identity import (
    delete_user_and_organization,
    find_user_by_email,
    reassign_organization_id,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


async def _target_user(
    db: AsyncSession, principal: Principal, email: str, *, allow_unaffiliated: bool,
) -> User:
    if not principal.is_operator:
        ensure_capability(
            principal, Capability.ADMINISTER_ORGANIZATION, principal.organization_id,
        )
    user = await find_user_by_email(db, email)
    if user.organization_id is None and allow_unaffiliated:
        return user
    ensure_capability(
        principal, Capability.ADMINISTER_ORGANIZATION, user.organization_id,
    )
    return user


@router.post("/organizations/reassign", response_model=ReassignmentResponse)
async def reassign_organization(
    email: str = Query(..., min_length=3),
    force: bool = Query(False),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    """Give the user's organization a fresh PREFIX-YEAR-RANDOM identifier."""
    await _target_user(db, principal, email, allow_unaffiliated=True)
    settings = get_settings()
    result = await reassign_organization_id(
        db, email,
        force=force,
        prefix=settings.organization_id_prefix,
        max_attempts=settings.organization_id_max_attempts,
    )
    return ReassignmentResponse(**vars(result))


@router.delete("/users", response_model=DeletionResponse)
async def delete_user(
    email: str = Query(..., min_length=3),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    """Delete a user, its memberships, and its organization with all campuses."""
    await _target_user(db, principal, email, allow_unaffiliated=False)
    result = await delete_user_and_organization(db, email)
    return DeletionResponse(
        email=result.email,
        memberships=result.memberships,
        campuses=result.campuses,
    )
