"""
Purge Expired Sessions Use Case

Retention policy: physically removes sessions long past their expiry.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditEvent
from .dtos import PurgeSessionsResponse

logger = logging.getLogger(__name__)


class PurgeExpiredSessionsUseCase:
    """
    Business Rules:
    - Only sessions whose expires_at is older than the retention window go
    - Active sessions are never affected (retention is always positive)
    - Each purge run is audit-logged
    """

    def __init__(
        self,
        uow: UnitOfWork,
        retention: timedelta = timedelta(days=90),
        clock: Callable[[], datetime] = utcnow,
    ):
        if retention <= timedelta(0):
            raise ValueError("Retention must be positive")
        self.uow = uow
        self.retention = retention
        self.clock = clock

    async def execute(self) -> Result[PurgeSessionsResponse]:
        cutoff = self.clock() - self.retention

        async with self.uow:
            count = await self.uow.sessions.delete_expired_before(cutoff)

            audit = AuditEvent(
                action="sessions_purged",
                event_metadata={"purged_count": count, "cutoff": cutoff.isoformat()},
            )
            await self.uow.audit_events.create(audit)
            await self.uow.commit()

        logger.info(f"Purged {count} session(s) expired before {cutoff.isoformat()}")
        return Return.ok(PurgeSessionsResponse(purged_count=count, cutoff=cutoff))
