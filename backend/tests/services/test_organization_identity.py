"""Organization Identity — reassignment atomicity, identifier format, and cascade cleanup.

Invariants:
    - A reassignment moves churches.id and all three referencing columns, or nothing
    - A failure mid-rewrite leaves every row exactly as before and raises TransactionFailureError
    - New identifiers match PREFIX-YEAR-RANDOM and never equal an existing church id
    - Cleanup removes the user, its memberships, the church and every campus; unrelated
      tenants are untouched
    - Unknown emails are a ResourceNotFoundError with no side effects, however often repeated

Design Decisions:
    - Assertions read column values with fresh SELECTs: bulk updates bypass the identity map
    - Failures injected with SQLite triggers: the rollback path runs against a real engine
"""

import re
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select, text

from app.core.domain_types import UserRole
from app.core.errors import (
    GenerationExhaustedError, ResourceNotFoundError, TransactionFailureError,
)
from app.models.campus import Campus
from app.models.church import Church
from app.models.church_member import ChurchMember
from app.models.custom_role import CustomRole
from app.models.notification import Notification
from app.models.pathway import Pathway
from app.models.user import User
from app.services import organization_identity
from app.services.organization_identity import (
    delete_user_and_organization,
    generate_organization_id,
    reassign_organization_id,
)

from tests.services.seed_data import make_user, seed_tenant

NEW_ID = "GW-2026-ABCDEFGH1"


async def _count(db, model, *where) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*where))
    return result.scalar_one()


async def _church_refs(db, church_id: str) -> dict[str, int]:
    return {
        "churches": await _count(db, Church, Church.id == church_id),
        "users": await _count(db, User, User.organization_id == church_id),
        "memberships": await _count(db, ChurchMember, ChurchMember.church_id == church_id),
        "campuses": await _count(db, Campus, Campus.church_id == church_id),
    }


# ==============================================================================
# Reassignment
# ==============================================================================


async def test_reassign_moves_church_and_every_reference(test_db, tenant):
    result = await reassign_organization_id(
        test_db, tenant.admin_email, make_candidate=lambda: NEW_ID,
    )

    assert result.status == "reassigned"
    assert result.old_id == tenant.church_id
    assert result.new_id == NEW_ID
    assert (result.users, result.memberships, result.campuses) == (3, 3, 2)
    assert await _church_refs(test_db, tenant.church_id) == {
        "churches": 0, "users": 0, "memberships": 0, "campuses": 0,
    }
    assert await _church_refs(test_db, NEW_ID) == {
        "churches": 1, "users": 3, "memberships": 3, "campuses": 2,
    }


async def test_reassign_carries_roles_and_pathways_along(test_db, tenant):
    test_db.add(CustomRole(church_id=tenant.church_id, name="Usher", permissions=[]))
    test_db.add(Pathway(church_id=tenant.church_id, name="Next Steps", steps=[]))
    await test_db.commit()

    await reassign_organization_id(
        test_db, tenant.admin_email, make_candidate=lambda: NEW_ID,
    )

    assert await _count(test_db, CustomRole, CustomRole.church_id == NEW_ID) == 1
    assert await _count(test_db, Pathway, Pathway.church_id == NEW_ID) == 1
    assert await _count(test_db, Pathway, Pathway.church_id == tenant.church_id) == 0


async def test_reassign_leaves_other_tenants_untouched(test_db, tenant, other_tenant):
    before = await _church_refs(test_db, other_tenant.church_id)

    await reassign_organization_id(
        test_db, tenant.admin_email, make_candidate=lambda: NEW_ID,
    )

    assert await _church_refs(test_db, other_tenant.church_id) == before


async def test_reassign_failure_rolls_back_every_table(test_db, tenant):
    """A campus update aborting after church, users and members moved must undo them all."""
    await test_db.execute(text(
        "CREATE TRIGGER block_campus_move BEFORE UPDATE ON campuses "
        "BEGIN SELECT RAISE(ABORT, 'campus update blocked'); END"
    ))
    await test_db.commit()
    before = await _church_refs(test_db, tenant.church_id)

    with pytest.raises(TransactionFailureError) as exc_info:
        await reassign_organization_id(
            test_db, tenant.admin_email, make_candidate=lambda: NEW_ID,
        )

    assert exc_info.value.http_status == 500
    assert "campus update blocked" in exc_info.value.message
    assert await _church_refs(test_db, tenant.church_id) == before
    assert await _count(test_db, Church, Church.id == NEW_ID) == 0


async def test_reassign_skips_candidates_that_already_exist(test_db, tenant, other_tenant):
    candidates = iter([other_tenant.church_id, NEW_ID])

    result = await reassign_organization_id(
        test_db, tenant.admin_email, make_candidate=lambda: next(candidates),
    )

    assert result.new_id == NEW_ID
    assert await _church_refs(test_db, other_tenant.church_id) == {
        "churches": 1, "users": 3, "memberships": 3, "campuses": 2,
    }


async def test_reassign_retries_when_candidate_taken_between_check_and_write(
    test_db, tenant, other_tenant, monkeypatch,
):
    """Uniqueness violation on a candidate that now exists means: try another one."""
    real_exists = organization_identity.organization_exists
    stale_reads = {other_tenant.church_id}

    async def _racy_exists(db, organization_id):
        if organization_id in stale_reads:
            stale_reads.discard(organization_id)
            return False
        return await real_exists(db, organization_id)

    monkeypatch.setattr(organization_identity, "organization_exists", _racy_exists)
    candidates = iter([other_tenant.church_id, NEW_ID])

    result = await reassign_organization_id(
        test_db, tenant.admin_email, make_candidate=lambda: next(candidates),
    )

    assert result.status == "reassigned"
    assert result.new_id == NEW_ID
    assert await _church_refs(test_db, NEW_ID) == {
        "churches": 1, "users": 3, "memberships": 3, "campuses": 2,
    }


async def test_reassign_exhaustion_raises_and_changes_nothing(test_db, tenant, other_tenant):
    before = await _church_refs(test_db, tenant.church_id)

    with pytest.raises(GenerationExhaustedError) as exc_info:
        await reassign_organization_id(
            test_db, tenant.admin_email,
            max_attempts=3,
            make_candidate=lambda: other_tenant.church_id,
        )

    assert exc_info.value.attempts == 3
    assert "after 3 attempts" in exc_info.value.message
    assert await _church_refs(test_db, tenant.church_id) == before


async def test_reassign_generated_id_is_well_formed(test_db, tenant):
    result = await reassign_organization_id(test_db, tenant.admin_email, prefix="GW")

    year = datetime.now(timezone.utc).year
    assert re.fullmatch(rf"GW-{year}-[A-Z0-9]{{9}}", result.new_id)
    assert await _count(test_db, Church, Church.id == result.new_id) == 1


async def test_reassign_is_case_insensitive_on_email(test_db, tenant):
    result = await reassign_organization_id(
        test_db, "  ADMIN@Grace.ORG ", make_candidate=lambda: NEW_ID,
    )
    assert result.status == "reassigned"


async def test_reassign_well_formed_id_unchanged_without_force(test_db):
    seeded = await seed_tenant(test_db, church_id="GW-2024-K3J9X0Q1Z", domain="faith.org")

    result = await reassign_organization_id(
        test_db, seeded.admin_email, make_candidate=lambda: NEW_ID,
    )

    assert result.status == "unchanged"
    assert result.old_id == "GW-2024-K3J9X0Q1Z"
    assert await _count(test_db, Church, Church.id == NEW_ID) == 0


async def test_reassign_well_formed_id_rewritten_with_force(test_db):
    seeded = await seed_tenant(test_db, church_id="GW-2024-K3J9X0Q1Z", domain="faith.org")

    result = await reassign_organization_id(
        test_db, seeded.admin_email, force=True, make_candidate=lambda: NEW_ID,
    )

    assert result.status == "reassigned"
    assert (await _church_refs(test_db, NEW_ID))["users"] == 3


async def test_reassign_user_without_organization_is_unchanged(test_db):
    test_db.add(make_user("loner@example.org", UserRole.MEMBER, None))
    await test_db.commit()

    result = await reassign_organization_id(test_db, "loner@example.org")

    assert result.status == "unchanged"
    assert result.old_id is None


async def test_reassign_unknown_email_is_not_found_every_time(test_db, tenant):
    before = await _church_refs(test_db, tenant.church_id)

    for _ in range(2):
        with pytest.raises(ResourceNotFoundError):
            await reassign_organization_id(test_db, "nobody@example.org")

    assert await _church_refs(test_db, tenant.church_id) == before


# ==============================================================================
# Generator
# ==============================================================================


async def test_generate_returns_unused_identifier(test_db, tenant):
    candidates = iter([tenant.church_id, NEW_ID])
    generated = await generate_organization_id(
        test_db, make_candidate=lambda: next(candidates),
    )
    assert generated == NEW_ID


async def test_generate_exhaustion(test_db, tenant):
    with pytest.raises(GenerationExhaustedError):
        await generate_organization_id(
            test_db, max_attempts=2, make_candidate=lambda: tenant.church_id,
        )


# ==============================================================================
# Cleanup
# ==============================================================================


async def test_delete_removes_user_church_campuses_and_memberships(test_db, tenant):
    test_db.add(Notification(
        user_id=tenant.admin_id, type="SYSTEM", title="Hi", message="Welcome",
    ))
    test_db.add(Pathway(church_id=tenant.church_id, name="Membership", steps=[]))
    await test_db.commit()

    result = await delete_user_and_organization(test_db, tenant.admin_email)

    assert result.email == tenant.admin_email
    assert result.organization_id == tenant.church_id
    assert (result.memberships, result.campuses) == (1, 2)
    assert await _count(test_db, User, User.id == tenant.admin_id) == 0
    assert await _church_refs(test_db, tenant.church_id) == {
        "churches": 0, "users": 0, "memberships": 0, "campuses": 0,
    }
    assert await _count(test_db, Notification, Notification.user_id == tenant.admin_id) == 0
    assert await _count(test_db, Pathway, Pathway.church_id == tenant.church_id) == 0


async def test_delete_keeps_other_members_without_organization(test_db, tenant):
    await delete_user_and_organization(test_db, tenant.admin_email)

    result = await test_db.execute(
        select(User.id, User.organization_id).where(
            User.id.in_([tenant.pastor_id, tenant.member_id]),
        ),
    )
    rows = result.all()
    assert len(rows) == 2
    assert all(org is None for _, org in rows)


async def test_delete_leaves_other_tenants_untouched(test_db, tenant, other_tenant):
    before = await _church_refs(test_db, other_tenant.church_id)

    await delete_user_and_organization(test_db, tenant.admin_email)

    assert await _church_refs(test_db, other_tenant.church_id) == before
    assert await _count(test_db, User, User.id == other_tenant.admin_id) == 1


async def test_delete_user_without_organization(test_db, tenant):
    loner_id = uuid.uuid4()
    test_db.add(make_user("loner@example.org", UserRole.MEMBER, None, id=loner_id))
    await test_db.flush()
    test_db.add(ChurchMember(user_id=loner_id, church_id=tenant.church_id))
    await test_db.commit()

    result = await delete_user_and_organization(test_db, "loner@example.org")

    assert (result.memberships, result.campuses) == (1, 0)
    assert result.organization_id is None
    assert await _count(test_db, Church, Church.id == tenant.church_id) == 1


async def test_delete_failure_rolls_back(test_db, tenant):
    await test_db.execute(text(
        "CREATE TRIGGER block_church_delete BEFORE DELETE ON churches "
        "BEGIN SELECT RAISE(ABORT, 'church delete blocked'); END"
    ))
    await test_db.commit()
    before = await _church_refs(test_db, tenant.church_id)

    with pytest.raises(TransactionFailureError):
        await delete_user_and_organization(test_db, tenant.admin_email)

    assert await _count(test_db, User, User.id == tenant.admin_id) == 1
    assert await _church_refs(test_db, tenant.church_id) == before


async def test_delete_unknown_email_is_not_found_every_time(test_db, tenant):
    for _ in range(2):
        with pytest.raises(ResourceNotFoundError):
            await delete_user_and_organization(test_db, "nobody@example.org")
    assert await _count(test_db, User) == 3
