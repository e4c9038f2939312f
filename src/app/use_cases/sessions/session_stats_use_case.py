"""
Session Statistics Use Case

Aggregate counts over sessions. Every count in one response is classified
against the same instant, so the counts always add up.
"""

from datetime import datetime, timedelta
from typing import Callable, List
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.revocation_authority import Actor
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import SessionStatus
from .dtos import DeviceCount, SessionStatsResponse

RECENT_LOGIN_WINDOW = timedelta(hours=24)


class GetSessionStatsUseCase:
    """
    Use case for session statistics.

    Business Rules:
    - total_active + total_expired + total_revoked == number of sessions
    - recent_logins counts sessions created in the trailing 24 hours,
      regardless of status
    - Read-only: never touches last_seen_at
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def for_principal(self, principal_id: UUID) -> Result[SessionStatsResponse]:
        now = self.clock()
        recent_since = now - RECENT_LOGIN_WINDOW
        counts = {status: 0 for status in SessionStatus}
        recent_logins = 0

        async with self.uow:
            sessions = await self.uow.sessions.get_by_principal_id(principal_id)
            for session in sessions:
                counts[session.status_at(now)] += 1
                if session.created_at >= recent_since:
                    recent_logins += 1

        return Return.ok(
            SessionStatsResponse(
                total_active=counts[SessionStatus.active],
                total_expired=counts[SessionStatus.expired],
                total_revoked=counts[SessionStatus.revoked],
                recent_logins=recent_logins,
            )
        )

    async def for_platform(self, actor: Actor) -> Result[SessionStatsResponse]:
        if not actor.is_platform_level:
            return Return.err(Error("FORBIDDEN", "Platform administrator access required"))

        now = self.clock()
        async with self.uow:
            counts = await self.uow.sessions.count_by_status(now, now - RECENT_LOGIN_WINDOW)

        return Return.ok(
            SessionStatsResponse(
                total_active=counts.total_active,
                total_expired=counts.total_expired,
                total_revoked=counts.total_revoked,
                recent_logins=counts.recent_logins,
            )
        )

    async def by_device(self, actor: Actor) -> Result[List[DeviceCount]]:
        if not actor.is_platform_level:
            return Return.err(Error("FORBIDDEN", "Platform administrator access required"))

        now = self.clock()
        async with self.uow:
            rows = await self.uow.sessions.count_active_by_device_type(now)

        return Return.ok([DeviceCount(device=device, count=count) for device, count in rows])
