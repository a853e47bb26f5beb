"""User Settings Routes — campus selection, theme, onboarding flag, AI chat visibility."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.auth import PublicUser
from app.schemas.profile import (
    AiChatSettings, CampusSelection, OnboardingUpdate, ThemeUpdate,
)
from app.services import profile

router = APIRouter(prefix="/api/v1/user", tags=["user-settings"])


@router.patch("/campus", response_model=PublicUser)
async def select_campus(
    body: CampusSelection,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await profile.select_campus(db, user, body.campus_id)


@router.patch("/theme", response_model=PublicUser)
async def set_theme(
    body: ThemeUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await profile.set_theme(db, user, body.theme)


@router.patch("/onboarding", response_model=PublicUser)
async def set_onboarding(
    body: OnboardingUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await profile.set_onboarding(db, user, body.completed)


@router.get("/ai-chat-settings", response_model=AiChatSettings)
async def get_ai_chat_settings(user: User = Depends(get_current_user)):
    return AiChatSettings(ai_chat_visible=user.ai_chat_visible)


@router.put("/ai-chat-settings", response_model=AiChatSettings)
async def put_ai_chat_settings(
    body: AiChatSettings,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await profile.set_ai_chat_visible(db, user, body.ai_chat_visible)
    return AiChatSettings(ai_chat_visible=user.ai_chat_visible)
