"""
Create Session Use Case

Starts a new session after the login flow has verified credentials.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List
from uuid import UUID

from libs.result import Result, Return
from src.app.services.device_fingerprinter import fingerprint
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import generate_session_token, hash_session_token, utcnow
from src.domain.entities import AuditEvent, Session
from .dtos import CreateSessionCommand, CreateSessionResponse, SessionView

logger = logging.getLogger(__name__)

SESSION_LIMIT_REASON = "Session limit exceeded"


class CreateSessionUseCase:
    """
    Use case for creating a session on successful login.

    Business Rules:
    - Device, browser, OS and IP are fingerprinted once and never change
    - expires_at = created_at + TTL, fixed for the session's lifetime
    - last_seen_at starts equal to created_at
    - Only the token hash is stored; the token is returned once
    - With a concurrent limit, the oldest active sessions are revoked
      instead of rejecting the login
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ttl: timedelta = timedelta(hours=24),
        max_concurrent: int = 0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.ttl = ttl
        self.max_concurrent = max_concurrent
        self.clock = clock

    async def execute(self, command: CreateSessionCommand) -> Result[CreateSessionResponse]:
        """
        Execute create session use case.

        Args:
            command: Verified principal, tenant, role and raw request context

        Returns:
            Result with CreateSessionResponse containing the session and token
        """
        device = fingerprint(command.user_agent, command.ip_address)
        token = generate_session_token()
        now = self.clock()

        async with self.uow:
            evicted = await self._enforce_session_limit(command.principal_id, now)

            session = Session(
                principal_id=command.principal_id,
                tenant_id=command.tenant_id,
                role=command.role.value,
                token_hash=hash_session_token(token),
                device_name=device.device_name,
                device_type=device.device_type,
                browser=device.browser,
                os=device.os,
                ip_address=device.ip_address,
                created_at=now,
                last_seen_at=now,
                expires_at=now + self.ttl,
            )
            await self.uow.sessions.create(session)

            audit = AuditEvent(
                tenant_id=command.tenant_id,
                user_id=command.principal_id,
                action="session_created",
                event_metadata={
                    "session_id": str(session.id),
                    "device_name": device.device_name,
                    "ip_address": device.ip_address,
                    "evicted_session_ids": [str(sid) for sid in evicted],
                },
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            logger.info(
                f"Session created: session_id={session.id} principal_id={command.principal_id}"
            )

            return Return.ok(
                CreateSessionResponse(
                    session=SessionView.from_entity(session, now),
                    token=token,
                    evicted_session_ids=[str(sid) for sid in evicted],
                )
            )

    async def _enforce_session_limit(self, principal_id: UUID, now: datetime) -> List[UUID]:
        if self.max_concurrent <= 0:
            return []

        active = await self.uow.sessions.get_active_by_principal_id(principal_id, now)
        excess = len(active) - self.max_concurrent + 1
        evicted = []
        for session in active[: max(excess, 0)]:
            if await self.uow.sessions.revoke(session.id, now, SESSION_LIMIT_REASON):
                evicted.append(session.id)
                await self.uow.audit_events.create(
                    AuditEvent(
                        tenant_id=session.tenant_id,
                        user_id=principal_id,
                        action="session_evicted",
                        event_metadata={
                            "session_id": str(session.id),
                            "reason": SESSION_LIMIT_REASON,
                        },
                    )
                )
                logger.info(
                    f"Session evicted by limit: session_id={session.id} principal_id={principal_id}"
                )
        return evicted
