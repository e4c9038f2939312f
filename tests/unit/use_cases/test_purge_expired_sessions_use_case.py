"""
Unit tests for Purge Expired Sessions Use Case
"""

import pytest
from datetime import timedelta

from src.app.use_cases.sessions import PurgeExpiredSessionsUseCase
from tests.utils.factories import make_session


@pytest.mark.asyncio
async def test_purge_removes_only_sessions_past_retention(memory_uow, store, clock):
    now = clock.now
    ancient = make_session(created_at=now - timedelta(days=100))
    recently_expired = make_session(created_at=now - timedelta(days=3))
    active = make_session(created_at=now - timedelta(hours=1))
    ancient_revoked = make_session(
        created_at=now - timedelta(days=120), revoked_at=now - timedelta(days=119)
    )
    for session in (ancient, recently_expired, active, ancient_revoked):
        store.add(session)

    use_case = PurgeExpiredSessionsUseCase(memory_uow, retention=timedelta(days=90), clock=clock)
    result = await use_case.execute()

    assert result.is_ok()
    assert result.value.purged_count == 2
    assert result.value.cutoff == now - timedelta(days=90)
    assert set(store.sessions) == {recently_expired.id, active.id}
    assert store.audit_events[-1].action == "sessions_purged"
    assert memory_uow.committed is True


@pytest.mark.asyncio
async def test_purge_with_nothing_to_remove(memory_uow, store, clock):
    session = make_session(created_at=clock.now)
    store.add(session)

    result = await PurgeExpiredSessionsUseCase(memory_uow, clock=clock).execute()

    assert result.value.purged_count == 0
    assert session.id in store.sessions


def test_purge_rejects_non_positive_retention(memory_uow):
    with pytest.raises(ValueError):
        PurgeExpiredSessionsUseCase(memory_uow, retention=timedelta(0))
