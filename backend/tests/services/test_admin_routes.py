"""Admin Routes — authorization and HTTP mapping of reassignment and deletion.

Invariants:
    - Operator (X-Admin-Key) may act on any organization
    - A SUPER_ADMIN may act only on its own organization; lesser roles never
    - Wrong admin key is a 401, unknown email a 404, exhaustion/transaction failure a 500
    - Callers without the capability get 403 before any email lookup (no existence oracle)
"""

from sqlalchemy import func, select, text

from app.core.domain_types import UserRole
from app.models.church import Church
from app.models.user import User

from tests.services.seed_data import as_operator, as_user, make_user


async def test_operator_reassigns_legacy_identifier(client, tenant):
    res = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": tenant.admin_email},
        headers=as_operator(),
    )

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "reassigned"
    assert body["old_id"] == tenant.church_id
    assert body["new_id"].startswith("GW-")
    assert (body["users"], body["memberships"], body["campuses"]) == (3, 3, 2)


async def test_super_admin_reassigns_own_organization(client, tenant, test_db):
    res = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": tenant.admin_email},
        headers=as_user(tenant.admin_id),
    )

    assert res.status_code == 200
    new_id = res.json()["new_id"]
    count = await test_db.execute(
        select(func.count()).select_from(User).where(User.organization_id == new_id),
    )
    assert count.scalar_one() == 3


async def test_super_admin_cannot_touch_other_organization(client, tenant, other_tenant):
    res = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": other_tenant.admin_email},
        headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


async def test_pastor_cannot_reassign(client, tenant):
    res = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": tenant.admin_email},
        headers=as_user(tenant.pastor_id),
    )
    assert res.status_code == 403


async def test_wrong_admin_key_is_unauthorized(client, tenant):
    res = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": tenant.admin_email},
        headers={"X-Admin-Key": "not-the-key"},
    )
    assert res.status_code == 401


async def test_missing_caller_is_unauthorized(client, tenant):
    res = await client.delete(
        "/api/v1/admin/users", params={"email": tenant.admin_email},
    )
    assert res.status_code == 401


async def test_reassign_unknown_email_is_404(client, tenant):
    res = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": "nobody@example.org"},
        headers=as_operator(),
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_reassign_twice_is_idempotent_without_force(client, tenant):
    first = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": tenant.admin_email},
        headers=as_operator(),
    )
    second = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": tenant.admin_email},
        headers=as_operator(),
    )

    assert second.status_code == 200
    assert second.json()["status"] == "unchanged"
    assert second.json()["old_id"] == first.json()["new_id"]


async def test_reassign_transaction_failure_is_500(client, tenant, test_db):
    await test_db.execute(text(
        "CREATE TRIGGER block_campus_move BEFORE UPDATE ON campuses "
        "BEGIN SELECT RAISE(ABORT, 'campus update blocked'); END"
    ))
    await test_db.commit()

    res = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": tenant.admin_email},
        headers=as_operator(),
    )

    assert res.status_code == 500
    assert res.json()["error"]["code"] == "TRANSACTION_FAILURE"
    message = res.json()["error"]["message"]
    assert "campus update blocked" in message
    assert "[SQL:" not in message
    assert "[parameters:" not in message
    church = await test_db.execute(
        select(Church.id).where(Church.id == tenant.church_id),
    )
    assert church.scalar_one() == tenant.church_id


async def test_operator_deletes_user_and_organization(client, tenant, test_db):
    res = await client.delete(
        "/api/v1/admin/users",
        params={"email": tenant.admin_email},
        headers=as_operator(),
    )

    assert res.status_code == 200
    body = res.json()
    assert body == {
        "status": "deleted",
        "email": tenant.admin_email,
        "memberships": 1,
        "campuses": 2,
    }
    remaining = await test_db.execute(
        select(func.count()).select_from(Church).where(Church.id == tenant.church_id),
    )
    assert remaining.scalar_one() == 0


async def test_delete_unknown_email_is_404(client, tenant):
    for _ in range(2):
        res = await client.delete(
            "/api/v1/admin/users",
            params={"email": "nobody@example.org"},
            headers=as_operator(),
        )
        assert res.status_code == 404


async def test_unauthorized_role_cannot_discover_emails(client, tenant):
    for email in ("nobody@example.org", tenant.admin_email):
        res = await client.post(
            "/api/v1/admin/organizations/reassign",
            params={"email": email},
            headers=as_user(tenant.pastor_id),
        )
        assert res.status_code == 403

        res = await client.delete(
            "/api/v1/admin/users",
            params={"email": email},
            headers=as_user(tenant.member_id),
        )
        assert res.status_code == 403


async def test_user_without_organization_is_nothing_to_do(client, tenant, test_db):
    test_db.add(make_user("drifter@example.org", UserRole.MEMBER, None))
    await test_db.commit()

    res = await client.post(
        "/api/v1/admin/organizations/reassign",
        params={"email": "drifter@example.org"},
        headers=as_user(tenant.admin_id),
    )

    assert res.status_code == 200
    assert res.json()["status"] == "unchanged"
    assert res.json()["reason"] == "user has no organization"
