"""Profile Routes — the caller's own profile and password."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.profile import PasswordChange, ProfileResponse, ProfileUpdate
from app.services import accounts, profile

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(user: User = Depends(get_current_user)):
    return profile.profile_view(user)


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await profile.update_profile(db, user, body)
    return profile.profile_view(user)


@router.post("/password")
async def change_password(
    body: PasswordChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await accounts.change_password(db, user, body.current_password, body.new_password)
    return {"status": "changed"}
