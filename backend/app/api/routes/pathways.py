"""Pathway Routes — pathway CRUD, enrollment, step completion, analytics.

Invariants:
    - Writes require MANAGE_PATHWAYS over the pathway's church
    - Reads require a signed-in caller who belongs to the pathway's church
      (organization or membership); listings only cover the caller's churches
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_principal
from app.core.domain_types import Capability
from app.core.errors import ForbiddenError
from app.core.permissions import Principal, ensure_capability
from app.infrastructure.database import get_db
from app.models.pathway import Pathway
from app.models.pathway_progress import PathwayProgress
from app.models.user import User
from app.schemas.pathway import (
    EnrolledMember, EnrollmentResponse, EnrollRequest, EnrollResult,
    PathwayAnalytics, PathwayCreate, PathwayResponse, PathwayUpdate,
)
from app.services import pathways
from app.services.churches import church_ids_of

router = APIRouter(prefix="/api/v1/pathways", tags=["pathways"])


def _pathway_view(pathway: Pathway, counts: tuple[int, int] = (0, 0)) -> PathwayResponse:
    view = PathwayResponse.model_validate(pathway)
    view.enrolled_count, view.completed_count = counts
    return view


def _enrollment_view(progress: PathwayProgress, user: User) -> EnrollmentResponse:
    return EnrollmentResponse(
        id=progress.id,
        pathway_id=progress.pathway_id,
        current_step=progress.current_step,
        started_at=progress.started_at,
        completed_at=progress.completed_at,
        user=EnrolledMember(id=user.id, name=user.name, email=user.email),
        completed_step_ids=[c.step_id for c in progress.completions],
    )


async def _writable_pathway(
    pathway_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> Pathway:
    pathway = await pathways.get_pathway(db, pathway_id)
    ensure_capability(principal, Capability.MANAGE_PATHWAYS, pathway.church_id)
    return pathway


async def _readable_pathway(
    pathway_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Pathway:
    pathway = await pathways.get_pathway(db, pathway_id)
    if pathway.church_id not in church_ids_of(user):
        raise ForbiddenError("Pathway belongs to another church")
    return pathway


@router.get("", response_model=list[PathwayResponse])
async def list_pathways(
    church_id: str | None = Query(None, alias="churchId"),
    campus_id: UUID | None = Query(None, alias="campusId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    church_ids = church_ids_of(user)
    if church_id is not None and church_id not in church_ids:
        raise ForbiddenError("Not a member of this church")
    items = await pathways.list_pathways(db, church_ids, church_id, campus_id)
    counts = await pathways.enrollment_counts(db, [p.id for p in items])
    return [_pathway_view(p, counts.get(p.id, (0, 0))) for p in items]


@router.post("", response_model=PathwayResponse, status_code=status.HTTP_201_CREATED)
async def create_pathway(
    body: PathwayCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    ensure_capability(principal, Capability.MANAGE_PATHWAYS, body.church_id)
    return _pathway_view(await pathways.create_pathway(db, body))


@router.get("/{pathway_id}", response_model=PathwayResponse)
async def get_pathway(
    pathway: Pathway = Depends(_readable_pathway),
    db: AsyncSession = Depends(get_db),
):
    counts = await pathways.enrollment_counts(db, [pathway.id])
    return _pathway_view(pathway, counts.get(pathway.id, (0, 0)))


@router.patch("/{pathway_id}", response_model=PathwayResponse)
async def update_pathway(
    body: PathwayUpdate,
    pathway: Pathway = Depends(_writable_pathway),
    db: AsyncSession = Depends(get_db),
):
    return _pathway_view(await pathways.update_pathway(db, pathway, body))


@router.delete("/{pathway_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pathway(
    pathway: Pathway = Depends(_writable_pathway),
    db: AsyncSession = Depends(get_db),
):
    await pathways.delete_pathway(db, pathway)


@router.post(
    "/{pathway_id}/duplicate", response_model=PathwayResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_pathway(
    pathway: Pathway = Depends(_writable_pathway),
    db: AsyncSession = Depends(get_db),
):
    return _pathway_view(await pathways.duplicate_pathway(db, pathway))


# ─── Enrollment ─────────────────────────────────────────────────

@router.post(
    "/{pathway_id}/enroll", response_model=EnrollResult,
    status_code=status.HTTP_201_CREATED,
)
async def enroll(
    body: EnrollRequest,
    pathway: Pathway = Depends(_writable_pathway),
    db: AsyncSession = Depends(get_db),
):
    created, skipped = await pathways.enroll_members(db, pathway, body.user_ids)
    return EnrollResult(
        message=f"Successfully enrolled {len(created)} member(s)",
        enrollments=[_enrollment_view(p, u) for p, u in created],
        skipped=skipped,
    )


@router.get("/{pathway_id}/enroll", response_model=list[EnrollmentResponse])
async def list_enrollments(
    pathway: Pathway = Depends(_readable_pathway),
    db: AsyncSession = Depends(get_db),
):
    rows = await pathways.list_enrollments(db, pathway.id)
    return [_enrollment_view(p, u) for p, u in rows]


@router.delete(
    "/{pathway_id}/enroll/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def unenroll(
    enrollment_id: UUID,
    pathway: Pathway = Depends(_writable_pathway),
    db: AsyncSession = Depends(get_db),
):
    await pathways.unenroll(db, pathway.id, enrollment_id)


@router.post(
    "/{pathway_id}/enroll/{enrollment_id}/steps/{step_id}/complete",
    response_model=EnrollmentResponse,
)
async def complete_step(
    enrollment_id: UUID,
    step_id: UUID,
    pathway: Pathway = Depends(_writable_pathway),
    db: AsyncSession = Depends(get_db),
):
    progress = await pathways.complete_step(db, pathway, enrollment_id, step_id)
    member = await db.get(User, progress.user_id)
    return _enrollment_view(progress, member)


@router.get("/{pathway_id}/analytics", response_model=PathwayAnalytics)
async def analytics(
    pathway: Pathway = Depends(_readable_pathway),
    db: AsyncSession = Depends(get_db),
):
    return await pathways.pathway_analytics(db, pathway)
