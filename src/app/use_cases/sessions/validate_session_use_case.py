"""
Validate Session Use Case

The gate every authenticated request passes through.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import hash_session_token, utcnow
from src.domain.entities import Session, SessionInvalidCause, SessionStatus

logger = logging.getLogger(__name__)


class ValidateSessionUseCase:
    """
    Use case for validating a session token and recording activity.

    Business Rules:
    - Unknown, revoked and expired tokens all fail with SESSION_INVALID
    - The cause is logged but never returned to the caller
    - One indexed read, then one conditional write of last_seen_at
    - Activity never extends expires_at
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self, token: Optional[str]) -> Result[Session]:
        if not token:
            return self._invalid(SessionInvalidCause.unknown)

        now = self.clock()

        async with self.uow:
            session = await self.uow.sessions.get_by_token_hash(hash_session_token(token))
            if session is None:
                return self._invalid(SessionInvalidCause.unknown)

            status = session.status_at(now)
            if status == SessionStatus.revoked:
                return self._invalid(SessionInvalidCause.revoked, session)
            if status == SessionStatus.expired:
                return self._invalid(SessionInvalidCause.expired, session)

            if not await self.uow.sessions.touch(session, now):
                # Revoked after the lookup
                return self._invalid(SessionInvalidCause.revoked, session)
            await self.uow.commit()

            return Return.ok(session)

    def _invalid(
        self, cause: SessionInvalidCause, session: Optional[Session] = None
    ) -> Result[Session]:
        session_id = session.id if session is not None else None
        logger.warning(
            f"Session validation failed: cause={cause.value} session_id={session_id}"
        )
        return Return.err(Error("SESSION_INVALID", "Not authenticated"))
