"""Notification Routes — owner-scoped inbox and organization announcements.

Invariants:
    - Listing returns only the caller's notifications, newest first, with an unread count
    - Touching someone else's notification is a 403, a missing one a 404
    - Announcements reach every user of the church
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.models.notification import Notification

from tests.services.seed_data import as_user


@pytest.fixture
async def inbox(test_db, tenant):
    """Two notifications for the member (one read), one for the pastor."""
    now = datetime.now(timezone.utc)
    rows = [
        Notification(
            user_id=tenant.member_id, type="SYSTEM", title="Older",
            message="first", read=True, created_at=now - timedelta(hours=1),
        ),
        Notification(
            user_id=tenant.member_id, type="EVENT", title="Newer",
            message="second", created_at=now,
        ),
        Notification(
            user_id=tenant.pastor_id, type="MEMBER", title="Pastor only",
            message="third", created_at=now,
        ),
    ]
    test_db.add_all(rows)
    await test_db.commit()
    return {"older": rows[0].id, "newer": rows[1].id, "pastor": rows[2].id}


async def test_list_is_own_and_newest_first(client, tenant, inbox):
    res = await client.get("/api/v1/notifications", headers=as_user(tenant.member_id))

    assert res.status_code == 200
    body = res.json()
    assert [n["title"] for n in body["notifications"]] == ["Newer", "Older"]
    assert body["unread_count"] == 1


async def test_mark_read(client, tenant, inbox):
    res = await client.patch(
        f"/api/v1/notifications/{inbox['newer']}/read",
        headers=as_user(tenant.member_id),
    )
    assert res.status_code == 200
    assert res.json()["read"] is True

    res = await client.get("/api/v1/notifications", headers=as_user(tenant.member_id))
    assert res.json()["unread_count"] == 0


async def test_mark_read_on_foreign_notification_is_403(client, tenant, inbox):
    res = await client.patch(
        f"/api/v1/notifications/{inbox['pastor']}/read",
        headers=as_user(tenant.member_id),
    )
    assert res.status_code == 403


async def test_mark_read_on_missing_notification_is_404(client, tenant, inbox):
    res = await client.patch(
        f"/api/v1/notifications/{uuid.uuid4()}/read",
        headers=as_user(tenant.member_id),
    )
    assert res.status_code == 404


async def test_mark_all_read_touches_only_callers_rows(client, tenant, inbox):
    res = await client.patch(
        "/api/v1/notifications/read-all", headers=as_user(tenant.member_id),
    )
    assert res.status_code == 200
    assert res.json() == {"updated": 1}

    res = await client.get("/api/v1/notifications", headers=as_user(tenant.pastor_id))
    assert res.json()["unread_count"] == 1


async def test_delete_notification(client, tenant, inbox):
    res = await client.delete(
        f"/api/v1/notifications/{inbox['older']}",
        headers=as_user(tenant.member_id),
    )
    assert res.status_code == 204

    res = await client.get("/api/v1/notifications", headers=as_user(tenant.member_id))
    assert [n["title"] for n in res.json()["notifications"]] == ["Newer"]


async def test_delete_foreign_notification_is_403(client, tenant, inbox):
    res = await client.delete(
        f"/api/v1/notifications/{inbox['pastor']}",
        headers=as_user(tenant.member_id),
    )
    assert res.status_code == 403


async def test_announcement_reaches_every_member(client, tenant, other_tenant):
    res = await client.post(
        "/api/v1/notifications/announcements",
        json={
            "church_id": tenant.church_id,
            "title": "Easter service",
            "message": "Join us at 10am",
        },
        headers=as_user(tenant.admin_id),
    )
    assert res.status_code == 201
    assert res.json() == {"sent": 3}

    res = await client.get("/api/v1/notifications", headers=as_user(tenant.member_id))
    assert res.json()["notifications"][0]["type"] == "ANNOUNCEMENT"

    res = await client.get(
        "/api/v1/notifications", headers=as_user(other_tenant.member_id),
    )
    assert res.json()["notifications"] == []


async def test_announcement_requires_administer_organization(client, tenant):
    res = await client.post(
        "/api/v1/notifications/announcements",
        json={"church_id": tenant.church_id, "title": "Hi", "message": "There"},
        headers=as_user(tenant.pastor_id),
    )
    assert res.status_code == 403
