"""Church, Campus and Directory Routes — tenant-scoped reads and capability-gated writes.

Invariants:
    - Campus listing only shows campuses of the caller's churches
    - Campus names are unique per church (409)
    - Writes need MANAGE_CAMPUSES / ADMINISTER_ORGANIZATION over the right church
    - Member directory needs VIEW_MEMBERS and lists org users plus members, by name
"""

import uuid

from tests.services.seed_data import as_operator, as_user


# ==============================================================================
# Churches
# ==============================================================================


async def test_list_churches_returns_callers_organization(client, tenant, other_tenant):
    res = await client.get("/api/v1/churches", headers=as_user(tenant.member_id))

    assert res.status_code == 200
    assert [c["id"] for c in res.json()] == [tenant.church_id]


async def test_update_church_as_super_admin(client, tenant):
    res = await client.patch(
        f"/api/v1/churches/{tenant.church_id}",
        json={"name": "Grace Fellowship", "observes_church_membership": True},
        headers=as_user(tenant.admin_id),
    )

    assert res.status_code == 200
    assert res.json()["name"] == "Grace Fellowship"
    assert res.json()["observes_church_membership"] is True


async def test_update_church_as_pastor_is_forbidden(client, tenant):
    res = await client.patch(
        f"/api/v1/churches/{tenant.church_id}",
        json={"name": "Hijacked"},
        headers=as_user(tenant.pastor_id),
    )
    assert res.status_code == 403


# ==============================================================================
# Campuses
# ==============================================================================


async def test_list_campuses_scoped_to_caller(client, tenant, other_tenant):
    res = await client.get("/api/v1/campuses", headers=as_user(tenant.member_id))

    assert res.status_code == 200
    ids = {c["id"] for c in res.json()}
    assert ids == {str(tenant.campus_id), str(tenant.second_campus_id)}


async def test_list_campuses_without_caller_is_401(client, tenant):
    res = await client.get("/api/v1/campuses")
    assert res.status_code == 401


async def test_create_campus(client, tenant):
    res = await client.post(
        "/api/v1/campuses",
        json={"church_id": tenant.church_id, "name": "East Campus"},
        headers=as_user(tenant.admin_id),
    )

    assert res.status_code == 201
    assert res.json()["name"] == "East Campus"
    assert res.json()["is_active"] is True


async def test_create_duplicate_campus_name_is_409(client, tenant):
    res = await client.post(
        "/api/v1/campuses",
        json={"church_id": tenant.church_id, "name": "Main Campus"},
        headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CONFLICT"


async def test_same_campus_name_allowed_in_other_church(client, tenant, other_tenant):
    res = await client.post(
        "/api/v1/campuses",
        json={"church_id": other_tenant.church_id, "name": "West Campus"},
        headers=as_operator(),
    )
    assert res.status_code == 201


async def test_create_campus_in_foreign_church_is_forbidden(client, tenant, other_tenant):
    res = await client.post(
        "/api/v1/campuses",
        json={"church_id": other_tenant.church_id, "name": "Trojan Campus"},
        headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 403


async def test_rename_campus_to_existing_name_is_409(client, tenant):
    res = await client.patch(
        f"/api/v1/campuses/{tenant.second_campus_id}",
        json={"name": "Main Campus"},
        headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 409


async def test_update_and_get_campus(client, tenant):
    res = await client.patch(
        f"/api/v1/campuses/{tenant.second_campus_id}",
        json={"phone": "555-0100", "is_active": False},
        headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 200

    res = await client.get(
        f"/api/v1/campuses/{tenant.second_campus_id}",
        headers=as_user(tenant.member_id),
    )
    assert res.json()["phone"] == "555-0100"
    assert res.json()["is_active"] is False


async def test_delete_campus(client, tenant):
    res = await client.delete(
        f"/api/v1/campuses/{tenant.second_campus_id}",
        headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 204

    res = await client.get(
        f"/api/v1/campuses/{tenant.second_campus_id}",
        headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 404


async def test_get_unknown_campus_is_404(client, tenant):
    res = await client.get(
        f"/api/v1/campuses/{uuid.uuid4()}", headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 404


# ==============================================================================
# Directory
# ==============================================================================


async def test_list_users_ordered_by_name(client, tenant, other_tenant):
    res = await client.get(
        "/api/v1/users",
        params={"churchId": tenant.church_id},
        headers=as_user(tenant.pastor_id),
    )

    assert res.status_code == 200
    assert [u["name"] for u in res.json()] == ["Alice Admin", "Mary Member", "Paul Pastor"]


async def test_list_users_requires_view_members(client, tenant):
    res = await client.get(
        "/api/v1/users",
        params={"churchId": tenant.church_id},
        headers=as_user(tenant.member_id),
    )
    assert res.status_code == 403
