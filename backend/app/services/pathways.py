"""Pathways — discipleship track CRUD, enrollment, step completion, and analytics.

Invariants:
    - Step order is 1..n in request order after every create/update/duplicate
    - A user is enrolled at most once per pathway; repeat enrollments are skipped and counted
    - Completing a step is idempotent; current_step moves past the highest completed step
    - completed_at is stamped once, when every required step is completed, and the member
      is notified in the same commit
    - Analytics is computed by core/pathway_analytics from plain inputs
    - Listings never cross tenants: only pathways of the given churches are returned
    - Only users of the pathway's church (organization or membership) can be enrolled
    - A pathway's campus belongs to the pathway's church

Design Decisions:
    - Steps are owned by the pathway (delete-orphan): replacement is clear() + extend()
    - Listing counts come from one grouped query, not per-pathway loads
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError, ValidationFailedError
from app.core.pathway_analytics import (
    ProgressInput, StepInput, compute_pathway_analytics,
)
from app.models.church_member import ChurchMember
from app.models.pathway import Pathway
from app.models.pathway_progress import PathwayProgress
from app.models.pathway_step import PathwayStep
from app.models.step_completion import StepCompletion
from app.models.user import User
from app.schemas.pathway import PathwayCreate, PathwayUpdate, StepIn
from app.services.churches import get_campus
from app.services.notifications import notify_pathway_completion

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (Copy)"


def _build_steps(steps: list[StepIn]) -> list[PathwayStep]:
    return [
        PathwayStep(
            name=step.name,
            description=step.description,
            order=index,
            is_required=step.is_required,
        )
        for index, step in enumerate(steps, start=1)
    ]


async def get_pathway(db: AsyncSession, pathway_id: UUID) -> Pathway:
    pathway = await db.get(Pathway, pathway_id)
    if pathway is None:
        raise ResourceNotFoundError("Pathway", str(pathway_id))
    return pathway


async def enrollment_counts(
    db: AsyncSession, pathway_ids: list[UUID],
) -> dict[UUID, tuple[int, int]]:
    """pathway_id -> (enrolled, completed)."""
    if not pathway_ids:
        return {}
    result = await db.execute(
        select(
            PathwayProgress.pathway_id,
            func.count(PathwayProgress.id),
            func.count(PathwayProgress.completed_at),
        )
        .where(PathwayProgress.pathway_id.in_(pathway_ids))
        .group_by(PathwayProgress.pathway_id),
    )
    return {row[0]: (row[1], row[2]) for row in result.all()}


async def list_pathways(
    db: AsyncSession,
    church_ids: list[str],
    church_id: str | None = None,
    campus_id: UUID | None = None,
) -> list[Pathway]:
    """Pathways of church_ids; campus filter wins over church filter; newest first."""
    if not church_ids:
        return []
    stmt = (
        select(Pathway)
        .where(Pathway.church_id.in_(church_ids))
        .order_by(Pathway.created_at.desc())
    )
    if campus_id is not None:
        stmt = stmt.where(Pathway.campus_id == campus_id)
    elif church_id is not None:
        stmt = stmt.where(Pathway.church_id == church_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _ensure_campus_in_church(
    db: AsyncSession, campus_id: UUID, church_id: str,
) -> None:
    campus = await get_campus(db, campus_id)
    if campus.church_id != church_id:
        raise ValidationFailedError(
            "Campus does not belong to the pathway's church", field="campus_id",
        )


async def create_pathway(db: AsyncSession, payload: PathwayCreate) -> Pathway:
    if payload.campus_id is not None:
        await _ensure_campus_in_church(db, payload.campus_id, payload.church_id)
    pathway = Pathway(
        church_id=payload.church_id,
        campus_id=payload.campus_id,
        name=payload.name,
        description=payload.description,
        is_active=True,
        steps=_build_steps(payload.steps),
    )
    db.add(pathway)
    await db.commit()
    logger.info(
        "Pathway created",
        extra={"organization_id": payload.church_id, "counts": {"steps": len(payload.steps)}},
    )
    return pathway


async def update_pathway(
    db: AsyncSession, pathway: Pathway, payload: PathwayUpdate,
) -> Pathway:
    changes = payload.model_dump(exclude_unset=True, exclude={"steps"})
    if changes.get("campus_id") is not None:
        await _ensure_campus_in_church(db, changes["campus_id"], pathway.church_id)
    for key, value in changes.items():
        setattr(pathway, key, value)
    if payload.steps is not None:
        pathway.steps.clear()
        await db.flush()
        pathway.steps.extend(_build_steps(payload.steps))
    await db.commit()
    return pathway


async def delete_pathway(db: AsyncSession, pathway: Pathway) -> None:
    await db.delete(pathway)
    await db.commit()


async def duplicate_pathway(db: AsyncSession, pathway: Pathway) -> Pathway:
    """Inactive copy with the same steps, named '<name> (Copy)'."""
    copy = Pathway(
        church_id=pathway.church_id,
        campus_id=pathway.campus_id,
        name=f"{pathway.name}{COPY_SUFFIX}",
        description=pathway.description,
        is_active=False,
        steps=[
            PathwayStep(
                name=step.name,
                description=step.description,
                order=step.order,
                is_required=step.is_required,
            )
            for step in pathway.steps
        ],
    )
    db.add(copy)
    await db.commit()
    return copy


# ─── Enrollment ─────────────────────────────────────────────────

async def enroll_members(
    db: AsyncSession, pathway: Pathway, user_ids: list[UUID],
) -> tuple[list[tuple[PathwayProgress, User]], int]:
    """Enroll each user once. Returns (created enrollments, skipped count)."""
    requested = list(dict.fromkeys(user_ids))
    users_result = await db.execute(select(User).where(User.id.in_(requested)))
    users = {u.id: u for u in users_result.scalars().all()}
    missing = [str(uid) for uid in requested if uid not in users]
    if missing:
        raise ResourceNotFoundError("User", ", ".join(missing))

    member_result = await db.execute(
        select(ChurchMember.user_id).where(
            ChurchMember.church_id == pathway.church_id,
            ChurchMember.user_id.in_(requested),
        ),
    )
    members = set(member_result.scalars().all())
    outsiders = [
        str(uid) for uid in requested
        if uid not in members and users[uid].organization_id != pathway.church_id
    ]
    if outsiders:
        raise ValidationFailedError(
            f"Users are not members of this church: {', '.join(outsiders)}",
            field="user_ids",
        )

    existing_result = await db.execute(
        select(PathwayProgress.user_id).where(
            PathwayProgress.pathway_id == pathway.id,
            PathwayProgress.user_id.in_(requested),
        ),
    )
    already = set(existing_result.scalars().all())

    created = []
    for uid in requested:
        if uid in already:
            continue
        progress = PathwayProgress(
            user_id=uid, pathway_id=pathway.id, current_step=1, completions=[],
        )
        db.add(progress)
        created.append((progress, users[uid]))
    await db.commit()

    skipped = len(user_ids) - len(created)
    logger.info(
        "Members enrolled",
        extra={
            "organization_id": pathway.church_id,
            "counts": {"enrolled": len(created), "skipped": skipped},
        },
    )
    return created, skipped


async def list_enrollments(
    db: AsyncSession, pathway_id: UUID,
) -> list[tuple[PathwayProgress, User]]:
    result = await db.execute(
        select(PathwayProgress, User)
        .join(User, User.id == PathwayProgress.user_id)
        .where(PathwayProgress.pathway_id == pathway_id)
        .order_by(PathwayProgress.started_at.desc()),
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_enrollment(
    db: AsyncSession, pathway_id: UUID, enrollment_id: UUID,
) -> PathwayProgress:
    progress = await db.get(PathwayProgress, enrollment_id)
    if progress is None or progress.pathway_id != pathway_id:
        raise ResourceNotFoundError("Enrollment", str(enrollment_id))
    return progress


async def unenroll(db: AsyncSession, pathway_id: UUID, enrollment_id: UUID) -> None:
    progress = await get_enrollment(db, pathway_id, enrollment_id)
    await db.delete(progress)
    await db.commit()


async def complete_step(
    db: AsyncSession, pathway: Pathway, enrollment_id: UUID, step_id: UUID,
) -> PathwayProgress:
    """Record a step completion and advance the enrollment."""
    progress = await get_enrollment(db, pathway.id, enrollment_id)
    steps = {step.id: step for step in pathway.steps}
    if step_id not in steps:
        raise ResourceNotFoundError("Step", str(step_id))

    done = {c.step_id for c in progress.completions}
    if step_id not in done:
        progress.completions.append(StepCompletion(step_id=step_id))
        done.add(step_id)

    highest = max(steps[sid].order for sid in done if sid in steps)
    progress.current_step = min(highest + 1, len(steps))

    required = {sid for sid, step in steps.items() if step.is_required}
    if progress.completed_at is None and required <= done:
        progress.completed_at = datetime.now(timezone.utc)
        member = await db.get(User, progress.user_id)
        await notify_pathway_completion(
            db,
            progress.user_id,
            (member.name if member else None) or "A member",
            pathway.name,
            progress.user_id,
        )
        logger.info(
            "Pathway completed",
            extra={"user_id": str(progress.user_id), "organization_id": pathway.church_id},
        )
    await db.commit()
    return progress


# ─── Analytics ──────────────────────────────────────────────────

async def pathway_analytics(db: AsyncSession, pathway: Pathway) -> dict:
    rows = await list_enrollments(db, pathway.id)
    progress = [
        ProgressInput(
            id=p.id,
            member_name=user.name,
            current_step=p.current_step,
            started_at=p.started_at,
            completed_at=p.completed_at,
            completed_step_ids={c.step_id for c in p.completions},
        )
        for p, user in rows
    ]
    steps = [StepInput(id=s.id, name=s.name, order=s.order) for s in pathway.steps]
    return compute_pathway_analytics(steps, progress)
