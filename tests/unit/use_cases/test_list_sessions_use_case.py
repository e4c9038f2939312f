"""
Unit tests for session listing and statistics
"""

import pytest
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

from src.app.services.revocation_authority import Actor
from src.app.use_cases.sessions import (
    CreateSessionCommand,
    CreateSessionUseCase,
    GetSessionStatsUseCase,
    ListAllSessionsUseCase,
    ListSessionsUseCase,
    RevokeSessionUseCase,
)
from src.domain.entities import MembershipRole, SessionStatus
from tests.fixtures.json_loader import TestDataLoader
from tests.utils.factories import make_session


async def login(uow, clock, principal_id, user_agent_name="chrome_windows"):
    use_case = CreateSessionUseCase(uow, ttl=timedelta(hours=24), clock=clock)
    result = await use_case.execute(
        CreateSessionCommand(
            principal_id=principal_id,
            role=MembershipRole.member,
            user_agent=TestDataLoader.user_agent(user_agent_name),
            ip_address="198.51.100.4",
        )
    )
    return result.value


@pytest.mark.asyncio
async def test_two_devices_scenario(memory_uow, clock):
    """
    Two logins from different devices are listed newest first; revoking
    the second leaves the first active and total_revoked == 1.
    """
    user_id = uuid4()
    s1 = await login(memory_uow, clock, user_id, "chrome_windows")
    clock.advance(minutes=10)
    s2 = await login(memory_uow, clock, user_id, "safari_iphone")

    listed = (await ListSessionsUseCase(memory_uow, clock).execute(user_id)).value
    assert [s.id for s in listed] == [s2.session.id, s1.session.id]
    assert listed[0].device_type == "mobile"
    assert listed[1].device_type == "desktop"

    actor = Actor(principal_id=user_id, role=MembershipRole.member.value)
    revoke = RevokeSessionUseCase(memory_uow, clock=clock)
    await revoke.revoke_session(UUID(s2.session.id), actor)

    listed = (await ListSessionsUseCase(memory_uow, clock).execute(user_id)).value
    by_id = {s.id: s for s in listed}
    assert by_id[s1.session.id].status == SessionStatus.active.value
    assert by_id[s1.session.id].is_active is True
    assert by_id[s2.session.id].status == SessionStatus.revoked.value
    assert by_id[s2.session.id].revoked_reason == "Revoked by user"

    stats = (await GetSessionStatsUseCase(memory_uow, clock).for_principal(user_id)).value
    assert stats.total_revoked == 1
    assert stats.total_active == 1


@pytest.mark.asyncio
async def test_list_marks_current_session(memory_uow, clock):
    user_id = uuid4()
    s1 = await login(memory_uow, clock, user_id)
    clock.advance(minutes=1)
    await login(memory_uow, clock, user_id)

    listed = (
        await ListSessionsUseCase(memory_uow, clock).execute(
            user_id, current_session_id=UUID(s1.session.id)
        )
    ).value

    current = [s for s in listed if s.is_current]
    assert [s.id for s in current] == [s1.session.id]


@pytest.mark.asyncio
async def test_list_only_returns_own_sessions(memory_uow, clock):
    user_id = uuid4()
    await login(memory_uow, clock, user_id)
    await login(memory_uow, clock, uuid4())

    listed = (await ListSessionsUseCase(memory_uow, clock).execute(user_id)).value
    assert len(listed) == 1
    assert listed[0].principal_id == str(user_id)


@pytest.mark.asyncio
async def test_stats_counts_are_exhaustive(memory_uow, store, clock):
    """Test active + expired + revoked == total, all against one instant"""
    user_id = uuid4()
    now = clock.now
    sessions = [
        make_session(principal_id=user_id, created_at=now - timedelta(hours=1)),
        make_session(principal_id=user_id, created_at=now - timedelta(hours=2)),
        make_session(principal_id=user_id, created_at=now - timedelta(hours=30)),
        make_session(
            principal_id=user_id,
            created_at=now - timedelta(hours=3),
            revoked_at=now - timedelta(hours=2),
            revoked_reason="Revoked by user",
        ),
        make_session(
            principal_id=user_id,
            created_at=now - timedelta(hours=48),
            revoked_at=now - timedelta(hours=1),
            revoked_reason="Revoked by admin",
        ),
    ]
    for session in sessions:
        store.add(session)

    stats = (await GetSessionStatsUseCase(memory_uow, clock).for_principal(user_id)).value

    assert stats.total_active == 2
    assert stats.total_expired == 1
    assert stats.total_revoked == 2
    assert stats.total_active + stats.total_expired + stats.total_revoked == len(sessions)
    assert stats.recent_logins == 3


@pytest.mark.asyncio
async def test_stats_do_not_touch_sessions(memory_uow, store, clock):
    user_id = uuid4()
    session = make_session(principal_id=user_id, created_at=clock.now)
    store.add(session)

    clock.advance(hours=2)
    await GetSessionStatsUseCase(memory_uow, clock).for_principal(user_id)
    await ListSessionsUseCase(memory_uow, clock).execute(user_id)

    assert session.last_seen_at == session.created_at


@pytest.mark.asyncio
async def test_stats_reads_store_once(mock_uow, clock):
    user_id = uuid4()
    mock_uow.sessions.get_by_principal_id = AsyncMock(
        return_value=[make_session(principal_id=user_id, created_at=clock.now)]
    )
    mock_uow.sessions.touch = AsyncMock()

    result = await GetSessionStatsUseCase(mock_uow, clock).for_principal(user_id)

    assert result.value.total_active == 1
    mock_uow.sessions.get_by_principal_id.assert_called_once_with(user_id)
    mock_uow.sessions.touch.assert_not_called()
    mock_uow.commit.assert_not_called()


# ============================================================================
# Platform-wide views
# ============================================================================


SUPER_ADMIN = Actor(principal_id=uuid4(), role=MembershipRole.super_admin.value)


@pytest.mark.asyncio
async def test_platform_views_require_platform_admin(memory_uow, clock):
    tenant_admin = Actor(principal_id=uuid4(), tenant_id=uuid4(), role=MembershipRole.admin.value)
    stats = GetSessionStatsUseCase(memory_uow, clock)

    assert (await stats.for_platform(tenant_admin)).error.code == "FORBIDDEN"
    assert (await stats.by_device(tenant_admin)).error.code == "FORBIDDEN"
    listing = await ListAllSessionsUseCase(memory_uow, clock).execute(tenant_admin)
    assert listing.error.code == "FORBIDDEN"


@pytest.mark.asyncio
async def test_platform_stats_and_devices(memory_uow, store, clock):
    now = clock.now
    for session in [
        make_session(created_at=now, device_type="desktop"),
        make_session(created_at=now, device_type="mobile"),
        make_session(created_at=now, device_type="mobile"),
        make_session(created_at=now - timedelta(hours=30), device_type="tablet"),
        make_session(created_at=now, revoked_at=now, device_type="desktop"),
    ]:
        store.add(session)

    use_case = GetSessionStatsUseCase(memory_uow, clock)
    stats = (await use_case.for_platform(SUPER_ADMIN)).value
    assert (stats.total_active, stats.total_expired, stats.total_revoked) == (3, 1, 1)
    assert stats.recent_logins == 4

    devices = (await use_case.by_device(SUPER_ADMIN)).value
    assert [(d.device, d.count) for d in devices] == [("mobile", 2), ("desktop", 1)]


@pytest.mark.asyncio
async def test_list_all_sessions_paginates_and_filters(memory_uow, store, clock):
    user_id = uuid4()
    for hours_ago in range(5):
        session = make_session(principal_id=user_id, created_at=clock.now - timedelta(hours=hours_ago))
        store.add(session)
    other = make_session(created_at=clock.now, revoked_at=clock.now)
    store.add(other)

    use_case = ListAllSessionsUseCase(memory_uow, clock)
    page = (await use_case.execute(SUPER_ADMIN, page=2, limit=2, principal_id=user_id)).value

    assert page.pagination.total == 5
    assert page.pagination.total_pages == 3
    assert len(page.sessions) == 2
    assert page.sessions[0].created_at == clock.now - timedelta(hours=2)

    revoked = (await use_case.execute(SUPER_ADMIN, status=SessionStatus.revoked)).value
    assert [s.id for s in revoked.sessions] == [str(other.id)]
