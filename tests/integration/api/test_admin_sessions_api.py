"""
Integration tests for platform session administration
"""

import pytest
from httpx import AsyncClient
from uuid import uuid4

from src.domain.entities import MembershipRole
from tests.utils.api_client import bearer, login


async def platform_admin(client: AsyncClient):
    return await login(client, role=MembershipRole.super_admin)


@pytest.mark.asyncio
async def test_list_all_sessions(client: AsyncClient, clock):
    admin = await platform_admin(client)
    user_id = uuid4()
    for _ in range(3):
        clock.advance(minutes=1)
        await login(client, user_id)

    response = await client.get(
        "/admin/sessions",
        params={"principal_id": str(user_id), "limit": 2, "page": 1},
        headers=bearer(admin),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
    assert len(data["sessions"]) == 2
    assert data["sessions"][0]["created_at"] > data["sessions"][1]["created_at"]


@pytest.mark.asyncio
async def test_list_all_sessions_by_status(client: AsyncClient, clock):
    admin = await platform_admin(client)
    doomed = await login(client)
    await client.post(f"/sessions/{doomed['session']['id']}/revoke", headers=bearer(doomed))

    response = await client.get(
        "/admin/sessions", params={"status": "revoked"}, headers=bearer(admin)
    )

    assert [s["id"] for s in response.json()["sessions"]] == [doomed["session"]["id"]]


@pytest.mark.asyncio
async def test_admin_views_forbidden_for_tenant_admin(client: AsyncClient):
    tenant_admin = await login(client, tenant_id=uuid4(), role=MembershipRole.admin)

    for path in ("/admin/sessions", "/admin/sessions/stats", "/admin/sessions/devices"):
        response = await client.get(path, headers=bearer(tenant_admin))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.parametrize("role", [MembershipRole.owner, MembershipRole.admin])
@pytest.mark.asyncio
async def test_admin_views_forbidden_for_tenant_less_owner_or_admin(client: AsyncClient, role):
    actor = await login(client, tenant_id=None, role=role)

    for path in ("/admin/sessions", "/admin/sessions/stats", "/admin/sessions/devices"):
        response = await client.get(path, headers=bearer(actor))
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_platform_stats_and_device_breakdown(client: AsyncClient, clock):
    """Four logins at t0 have expired by t0+25h; the admin login at t0+23h is the only active one"""
    await platform_admin(client)
    await login(client, user_agent="safari_iphone")
    await login(client, user_agent="safari_iphone")
    await login(client, user_agent="safari_ipad")

    clock.advance(hours=23)
    admin = await platform_admin(client)
    clock.advance(hours=2)

    stats = await client.get("/admin/sessions/stats", headers=bearer(admin))
    assert stats.status_code == 200
    assert stats.json() == {
        "total_active": 1,
        "total_expired": 4,
        "total_revoked": 0,
        "recent_logins": 1,
    }

    devices = await client.get("/admin/sessions/devices", headers=bearer(admin))
    assert devices.json() == [{"device": "desktop", "count": 1}]


@pytest.mark.asyncio
async def test_purge_requires_admin_key(client: AsyncClient):
    response = await client.post("/admin/sessions/purge")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_purge_expired_sessions(client: AsyncClient, clock, admin_headers):
    old = await login(client)
    clock.advance(days=200)
    fresh = await login(client)

    response = await client.post("/admin/sessions/purge", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["purged_count"] == 1
    assert (await client.get("/sessions/mine", headers=bearer(fresh))).status_code == 200
    assert (await client.get("/sessions/mine", headers=bearer(old))).status_code == 401
