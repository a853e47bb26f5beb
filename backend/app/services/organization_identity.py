"""Organization Identity — identifier generation, identifier rewrite, and cascade cleanup.

Invariants:
    - Every read and write goes through the injected AsyncSession, strictly in sequence
    - Reassignment rewrites churches.id, users.organization_id, church_members.church_id
      and campuses.church_id in ONE transaction: all four move or none do
    - Cleanup deletes memberships, user, campuses, church in that order, in ONE transaction
    - Plain values (ids, emails) are captured before any write: ORM rows are never touched
      after a rollback (async sessions cannot refresh expired attributes implicitly)
    - Generation and write share one bounded attempt budget; exhaustion raises
      GenerationExhaustedError

Design Decisions:
    - Core-style bulk update()/delete() with synchronize_session=False: the counts come from
      rowcount and no child rows need to be loaded
    - A failed write is retried with a new candidate ONLY when it was a uniqueness violation
      and the candidate now exists (another request took it first); every other failure is a
      TransactionFailureError
    - Cleanup is unconditional: other members of the organization do not block it
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import OrganizationId
from app.core.errors import (
    ErrorContext,
    GenerationExhaustedError,
    ResourceNotFoundError,
    TransactionFailureError,
)
from app.core.organization_ids import format_candidate, is_well_formed
from app.models.campus import Campus
from app.models.church import Church
from app.models.church_member import ChurchMember
from app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "GW"
DEFAULT_MAX_ATTEMPTS = 100


@dataclass
class ReassignmentResult:
    status: str
    old_id: str | None = None
    new_id: str | None = None
    users: int = 0
    memberships: int = 0
    campuses: int = 0
    reason: str | None = None

    @classmethod
    def unchanged(cls, reason: str, old_id: str | None = None) -> "ReassignmentResult":
        return cls(status="unchanged", old_id=old_id, reason=reason)


@dataclass
class CleanupResult:
    email: str
    memberships: int = 0
    campuses: int = 0
    organization_id: str | None = None


# ─── Lookup ─────────────────────────────────────────────────────

async def find_user_by_email(db: AsyncSession, email: str) -> User:
    """Load a user (memberships included) by case-insensitive email."""
    normalized = email.strip().lower()
    result = await db.execute(select(User).where(User.email == normalized))
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User", normalized)
    return user


async def organization_exists(db: AsyncSession, organization_id: str) -> bool:
    result = await db.execute(
        select(Church.id).where(Church.id == organization_id),
    )
    return result.scalar_one_or_none() is not None


# ─── Generator ──────────────────────────────────────────────────

async def generate_organization_id(
    db: AsyncSession,
    *,
    prefix: str = DEFAULT_PREFIX,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    make_candidate: Callable[[], str] | None = None,
) -> OrganizationId:
    """Return an identifier not present in churches at the time of the check."""
    make_candidate = make_candidate or (lambda: format_candidate(prefix))
    for attempt in range(1, max_attempts + 1):
        candidate = make_candidate()
        if not await organization_exists(db, candidate):
            return OrganizationId(candidate)
        logger.warning(
            "Organization id collision",
            extra={"attempt": attempt, "new_id": candidate},
        )
    raise GenerationExhaustedError(max_attempts)


# ─── Cascade writer ─────────────────────────────────────────────

async def _rewrite_organization_id(
    db: AsyncSession, old_id: str, new_id: str,
) -> dict[str, int]:
    """Issue the four updates. Caller owns commit/rollback."""
    await db.execute(
        update(Church)
        .where(Church.id == old_id)
        .values(id=new_id)
        .execution_options(synchronize_session=False),
    )
    users = await db.execute(
        update(User)
        .where(User.organization_id == old_id)
        .values(organization_id=new_id)
        .execution_options(synchronize_session=False),
    )
    memberships = await db.execute(
        update(ChurchMember)
        .where(ChurchMember.church_id == old_id)
        .values(church_id=new_id)
        .execution_options(synchronize_session=False),
    )
    campuses = await db.execute(
        update(Campus)
        .where(Campus.church_id == old_id)
        .values(church_id=new_id)
        .execution_options(synchronize_session=False),
    )
    return {
        "users": users.rowcount,
        "memberships": memberships.rowcount,
        "campuses": campuses.rowcount,
    }


async def reassign_organization_id(
    db: AsyncSession,
    email: str,
    *,
    force: bool = False,
    prefix: str = DEFAULT_PREFIX,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    make_candidate: Callable[[], str] | None = None,
) -> ReassignmentResult:
    """Give the user's organization a fresh identifier and repoint every reference to it.

    Returns an "unchanged" result when the user has no organization, or when the
    current identifier is already well-formed and force is False.
    """
    user = await find_user_by_email(db, email)
    user_id = str(user.id)
    old_id = user.organization_id
    ctx = ErrorContext(user_id=user_id, organization_id=old_id)

    if old_id is None:
        return ReassignmentResult.unchanged("user has no organization")
    if not await organization_exists(db, old_id):
        raise ResourceNotFoundError("Church", old_id, context=ctx)
    if not force and is_well_formed(old_id, prefix):
        return ReassignmentResult.unchanged(
            "organization id already well-formed", old_id=old_id,
        )

    make_candidate = make_candidate or (lambda: format_candidate(prefix))
    for attempt in range(1, max_attempts + 1):
        candidate = make_candidate()
        if await organization_exists(db, candidate):
            logger.warning(
                "Organization id collision",
                extra={"attempt": attempt, "new_id": candidate},
            )
            continue

        try:
            counts = await _rewrite_organization_id(db, old_id, candidate)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if await organization_exists(db, candidate):
                logger.warning(
                    "Organization id taken concurrently, retrying",
                    extra={"attempt": attempt, "new_id": candidate},
                )
                continue
            logger.error(
                f"Organization id reassignment rolled back: {e.orig}",
                extra={"user_id": user_id, "old_id": old_id, "new_id": candidate},
            )
            raise TransactionFailureError("Organization id reassignment", e, context=ctx)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                f"Organization id reassignment rolled back: {e}",
                extra={"user_id": user_id, "old_id": old_id, "new_id": candidate},
            )
            raise TransactionFailureError("Organization id reassignment", e, context=ctx)

        logger.info(
            "Organization id reassigned",
            extra={
                "user_id": user_id, "old_id": old_id, "new_id": candidate,
                "attempt": attempt, "counts": counts,
            },
        )
        return ReassignmentResult(
            status="reassigned", old_id=old_id, new_id=candidate, **counts,
        )

    raise GenerationExhaustedError(max_attempts, context=ctx)


# ─── Cleanup writer ─────────────────────────────────────────────

async def delete_user_and_organization(
    db: AsyncSession, email: str,
) -> CleanupResult:
    """Delete a user, its memberships and (if any) its organization with the campuses.

    Other members of the organization do not block the delete: their memberships are
    removed by the schema cascade and their organization reference is set to NULL.
    """
    user = await find_user_by_email(db, email)
    user_id = user.id
    normalized = user.email
    organization_id = user.organization_id
    ctx = ErrorContext(user_id=str(user_id), organization_id=organization_id)

    try:
        memberships = await db.execute(
            delete(ChurchMember)
            .where(ChurchMember.user_id == user_id)
            .execution_options(synchronize_session=False),
        )
        await db.execute(
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False),
        )
        campus_count = 0
        if organization_id is not None:
            campuses = await db.execute(
                delete(Campus)
                .where(Campus.church_id == organization_id)
                .execution_options(synchronize_session=False),
            )
            campus_count = campuses.rowcount
            await db.execute(
                delete(Church)
                .where(Church.id == organization_id)
                .execution_options(synchronize_session=False),
            )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"Administrative deletion rolled back: {e}",
            extra={"user_id": str(user_id), "organization_id": organization_id},
        )
        raise TransactionFailureError("Administrative deletion", e, context=ctx)

    counts = {"memberships": memberships.rowcount, "campuses": campus_count}
    logger.info(
        "User and organization deleted",
        extra={
            "user_id": str(user_id), "organization_id": organization_id,
            "counts": counts,
        },
    )
    return CleanupResult(
        email=normalized,
        memberships=counts["memberships"],
        campuses=counts["campuses"],
        organization_id=organization_id,
    )
