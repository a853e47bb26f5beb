"""Caller Resolution — FastAPI dependencies that turn request headers into a Principal.

Invariants:
    - X-Admin-Key, when sent, must equal the configured admin key (constant-time compare);
      a wrong key is a 401, never a silent fall-through to X-User-Id
    - X-User-Id must name an existing, active user; anything else is a 401
    - No operator access while admin_api_key is unset

Design Decisions:
    - Header-based identification: session/token issuance lives in the front-end proxy,
      the API trusts the forwarded user id
"""

import logging
import secrets
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.domain_types import OrganizationId, UserId, UserRole
from app.core.errors import UnauthorizedError
from app.core.permissions import Principal
from app.infrastructure.database import get_db
from app.models.user import User

logger = logging.getLogger(__name__)


async def get_current_user(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the calling user from the X-User-Id header."""
    if not x_user_id:
        raise UnauthorizedError("User ID is required")
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise UnauthorizedError("Malformed user ID")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise UnauthorizedError("Unknown or inactive user")
    return user


def _operator_key_matches(presented: str) -> bool:
    configured = get_settings().admin_api_key
    if not configured:
        return False
    return secrets.compare_digest(presented.encode(), configured.encode())


async def get_principal(
    x_user_id: str | None = Header(None),
    x_admin_key: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Resolve the caller: platform operator (X-Admin-Key) or a user (X-User-Id)."""
    if x_admin_key is not None:
        if not _operator_key_matches(x_admin_key):
            logger.warning("Rejected admin key")
            raise UnauthorizedError("Invalid admin key")
        return Principal.operator()

    user = await get_current_user(x_user_id=x_user_id, db=db)
    return Principal(
        user_id=UserId(user.id),
        role=UserRole(user.role),
        organization_id=(
            OrganizationId(user.organization_id) if user.organization_id else None
        ),
    )
