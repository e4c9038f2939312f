"""
List Sessions Use Cases

Read-side views of sessions. Nothing here touches last_seen_at.
"""

import math
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.revocation_authority import Actor
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import SessionStatus
from .dtos import Pagination, SessionPage, SessionView


class ListSessionsUseCase:
    """Lists a principal's own sessions of every status, newest first"""

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, principal_id: UUID, current_session_id: Optional[UUID] = None
    ) -> Result[List[SessionView]]:
        now = self.clock()
        async with self.uow:
            sessions = await self.uow.sessions.get_by_principal_id(principal_id)
            return Return.ok(
                [SessionView.from_entity(s, now, current_session_id) for s in sessions]
            )


class ListAllSessionsUseCase:
    """
    Platform-wide paginated session listing.

    Business Rules:
    - Only platform-level actors may list other principals' sessions
    - Optional filters: principal, derived status
    """

    MAX_LIMIT = 200

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(
        self,
        actor: Actor,
        page: int = 1,
        limit: int = 50,
        principal_id: Optional[UUID] = None,
        status: Optional[SessionStatus] = None,
    ) -> Result[SessionPage]:
        if not actor.is_platform_level:
            return Return.err(Error("FORBIDDEN", "Platform administrator access required"))

        page = max(page, 1)
        limit = min(max(limit, 1), self.MAX_LIMIT)
        now = self.clock()

        async with self.uow:
            sessions, total = await self.uow.sessions.list_paginated(
                now,
                principal_id=principal_id,
                status=status,
                limit=limit,
                offset=(page - 1) * limit,
            )
            return Return.ok(
                SessionPage(
                    sessions=[SessionView.from_entity(s, now) for s in sessions],
                    pagination=Pagination(
                        page=page,
                        limit=limit,
                        total=total,
                        total_pages=math.ceil(total / limit),
                    ),
                )
            )
