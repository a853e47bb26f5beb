"""Auth Routes — tenant registration, login, and public user lookup.

Invariants:
    - Registration is all-or-nothing (church, campus, admin user, membership)
    - Login failures never reveal whether the email exists
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.infrastructure.database import get_db
from app.schemas.auth import (
    CampusSummary, ChurchSummary, LoginRequest, LoginResponse,
    PublicUser, RegisterRequest, RegisterResponse,
)
from app.services import accounts

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post(
    "/register", response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    reg = await accounts.register_church(db, body, get_settings())
    return RegisterResponse(
        user=PublicUser.model_validate(reg.user),
        church=ChurchSummary(
            id=reg.church.id,
            name=reg.church.name,
            trial_ends_at=reg.church.trial_ends_at,
            subscription_status=reg.church.subscription_status,
        ),
        campus=CampusSummary(id=reg.campus.id, name=reg.campus.name),
    )


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await accounts.authenticate(db, body.email, body.password, get_settings())
    return LoginResponse(user=PublicUser.model_validate(user))


@router.get("/users/{user_id}", response_model=PublicUser)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db)):
    return await accounts.get_user(db, user_id)
