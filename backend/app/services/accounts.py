"""Accounts — church registration, login with lockout, and password changes.

Invariants:
    - Registration creates church, main campus, SUPER_ADMIN user and ADMIN membership
      in ONE commit: a failure leaves no partial tenant behind
    - The organization id is drawn inside a bounded loop: an insert that loses the id to a
      concurrent registration retries with a new candidate; exhaustion raises
      GenerationExhaustedError
    - A duplicate email is a ValidationFailedError (400), whether caught up front or by
      the unique constraint
    - Passwords are checked against the password policy before hashing
    - Lockout: login_max_attempts consecutive failures lock the account for lockout_minutes;
      a locked account is refused before the password is even checked
    - Successful login resets attempts and clears the lock

Design Decisions:
    - Lockout counters written on the failing request itself (commit before raising), so a
      401 still persists the increment
    - Datetimes normalized to aware UTC: SQLite hands back naive values
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.core.domain_types import MembershipRole, SubscriptionStatus, UserRole
from app.core.errors import (
    AccountLockedError,
    ErrorContext,
    ForbiddenError,
    GenerationExhaustedError,
    ResourceNotFoundError,
    TransactionFailureError,
    UnauthorizedError,
    ValidationFailedError,
)
from app.core.organization_ids import format_candidate
from app.core.password_policy import validate_password
from app.infrastructure.passwords import hash_password, needs_rehash, verify_password
from app.models.campus import Campus
from app.models.church import Church
from app.models.church_member import ChurchMember
from app.models.user import User
from app.schemas.auth import RegisterRequest
from app.services.organization_identity import organization_exists

logger = logging.getLogger(__name__)

DEFAULT_CAMPUS_NAME = "Main Campus"


@dataclass
class Registration:
    user: User
    church: Church
    campus: Campus


def as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def ensure_password_policy(password: str) -> None:
    check = validate_password(password)
    if not check.is_valid:
        raise ValidationFailedError("; ".join(check.errors), field="password")


async def get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    return user


async def email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.id).where(User.email == email))
    return result.scalar_one_or_none() is not None


def _email_exists() -> ValidationFailedError:
    return ValidationFailedError(
        "An account with this email already exists", field="email",
    )


async def register_church(
    db: AsyncSession,
    payload: RegisterRequest,
    settings: Settings,
    *,
    make_candidate: Callable[[], str] | None = None,
) -> Registration:
    """Create a new tenant with its first administrator.

    The identifier check and the insert share one bounded loop: when the insert loses
    a race for the candidate identifier, a new one is drawn; a lost race for the email
    is the same 400 the up-front check gives.
    """
    admin = payload.admin
    if await email_taken(db, admin.email):
        raise _email_exists()
    ensure_password_policy(admin.password)
    password_hash = hash_password(admin.password)

    prefix = settings.organization_id_prefix
    make_candidate = make_candidate or (lambda: format_candidate(prefix))
    max_attempts = settings.organization_id_max_attempts
    for attempt in range(1, max_attempts + 1):
        candidate = make_candidate()
        if await organization_exists(db, candidate):
            logger.warning(
                "Organization id collision",
                extra={"attempt": attempt, "new_id": candidate},
            )
            continue

        ctx = ErrorContext(organization_id=candidate)
        try:
            registration = await _insert_tenant(
                db, payload, settings, candidate, password_hash,
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if await organization_exists(db, candidate):
                logger.warning(
                    "Organization id taken concurrently, retrying",
                    extra={"attempt": attempt, "new_id": candidate},
                )
                continue
            if await email_taken(db, admin.email):
                raise _email_exists() from e
            logger.error(
                f"Registration rolled back: {e}", extra={"organization_id": candidate},
            )
            raise TransactionFailureError("Registration", e, context=ctx) from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                f"Registration rolled back: {e}", extra={"organization_id": candidate},
            )
            raise TransactionFailureError("Registration", e, context=ctx) from e

        logger.info(
            "Church registered",
            extra={
                "user_id": str(registration.user.id),
                "organization_id": candidate,
                "attempt": attempt,
            },
        )
        return registration

    raise GenerationExhaustedError(max_attempts)


async def _insert_tenant(
    db: AsyncSession,
    payload: RegisterRequest,
    settings: Settings,
    organization_id: str,
    password_hash: str,
) -> Registration:
    """Add church, campus, admin user and membership. Caller owns commit/rollback."""
    admin, church_in = payload.admin, payload.church
    full_address = (
        f"{church_in.address}, {church_in.city}, {church_in.state} {church_in.zip_code}"
    )
    church = Church(
        id=organization_id,
        name=church_in.name,
        description=church_in.description,
        address=full_address,
        phone=church_in.phone,
        email=church_in.email,
        website=church_in.website,
        subscription_status=SubscriptionStatus.TRIAL.value,
        trial_ends_at=datetime.now(timezone.utc) + timedelta(days=settings.trial_days),
        payment_method=None if payload.skip_payment else "pending",
    )
    campus = Campus(
        church_id=organization_id,
        name=church_in.campus_name or DEFAULT_CAMPUS_NAME,
        description="Primary church location",
        address=full_address,
        phone=church_in.phone,
        email=church_in.email,
        is_active=True,
    )
    db.add(church)
    await db.flush()
    db.add(campus)
    await db.flush()
    user = User(
        email=admin.email,
        password_hash=password_hash,
        name=f"{admin.first_name} {admin.last_name}",
        phone=admin.phone,
        role=UserRole.SUPER_ADMIN.value,
        organization_id=organization_id,
        organization_name=church.name,
        campus_id=campus.id,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    db.add(ChurchMember(
        user_id=user.id,
        church_id=organization_id,
        campus_id=campus.id,
        role=MembershipRole.ADMIN.value,
    ))
    await db.flush()
    return Registration(user=user, church=church, campus=campus)


async def authenticate(
    db: AsyncSession, email: str, password: str, settings: Settings,
) -> User:
    """Verify credentials, applying the failed-attempt lockout."""
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        raise UnauthorizedError("Invalid email or password")

    now = datetime.now(timezone.utc)
    locked_until = as_utc(user.locked_until)
    if locked_until is not None and locked_until > now:
        raise AccountLockedError(
            locked_until, context=ErrorContext(user_id=str(user.id)),
        )
    if not user.is_active:
        raise ForbiddenError("Account is deactivated")

    if not verify_password(user.password_hash, password):
        user.login_attempts += 1
        if user.login_attempts >= settings.login_max_attempts:
            user.locked_until = now + timedelta(minutes=settings.lockout_minutes)
            logger.warning(
                "Account locked after failed logins",
                extra={"user_id": str(user.id), "attempt": user.login_attempts},
            )
        await db.commit()
        raise UnauthorizedError("Invalid email or password")

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
    user.login_attempts = 0
    user.locked_until = None
    user.last_login = now
    await db.commit()
    return user


async def change_password(
    db: AsyncSession, user: User, current_password: str, new_password: str,
) -> None:
    if not verify_password(user.password_hash, current_password):
        raise UnauthorizedError("Current password is incorrect")
    ensure_password_policy(new_password)
    user.password_hash = hash_password(new_password)
    await db.commit()
    logger.info("Password changed", extra={"user_id": str(user.id)})
