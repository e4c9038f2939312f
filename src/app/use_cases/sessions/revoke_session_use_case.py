"""
Revoke Session Use Case

Handles session revocation for self-service logout and administration.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.revocation_authority import Actor, RevocationAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditEvent
from .dtos import BulkRevokeResponse, RevokeSessionResponse

logger = logging.getLogger(__name__)

DEFAULT_USER_REASON = "Revoked by user"
DEFAULT_ADMIN_REASON = "Revoked by admin"
REVOKE_OTHERS_REASON = "Revoked all other sessions"
REVOKE_ALL_REASON = "Revoked all sessions"

FORBIDDEN_ERROR = Error("FORBIDDEN", "Not allowed to revoke this session")


def _clean_reason(reason: Optional[str]) -> Optional[str]:
    if reason is None:
        return None
    reason = reason.strip()
    return reason or None


class RevokeSessionUseCase:
    """
    Use case for revoking sessions.

    Business Rules:
    - Users can revoke their own sessions
    - Admins/owners can revoke any session within their tenant
    - Platform-level admins can revoke any session
    - Revoking an already revoked session succeeds without rewriting it
    - A missing reason defaults to a generic user/admin string
    - Revocations are audit-logged
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authority: Optional[RevocationAuthority] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.authority = authority or RevocationAuthority()
        self.clock = clock

    async def revoke_session(
        self, session_id: UUID, actor: Actor, reason: Optional[str] = None
    ) -> Result[RevokeSessionResponse]:
        """
        Revoke a specific session by ID.

        Args:
            session_id: Session to revoke
            actor: Verified identity requesting the revocation
            reason: Optional free-text reason

        Returns:
            Result with RevokeSessionResponse, or SESSION_NOT_FOUND / FORBIDDEN
        """
        now = self.clock()

        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_id)
            if session is None:
                return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

            if not self.authority.can_revoke(actor, session):
                logger.warning(
                    f"Revocation forbidden: session_id={session_id} actor={actor.principal_id}"
                )
                return Return.err(FORBIDDEN_ERROR)

            is_self = session.principal_id == actor.principal_id
            final_reason = _clean_reason(reason) or (
                DEFAULT_USER_REASON if is_self else DEFAULT_ADMIN_REASON
            )

            performed = await self.uow.sessions.revoke(
                session_id, now, final_reason, revoked_by=actor.principal_id
            )

            if performed:
                audit = AuditEvent(
                    tenant_id=actor.tenant_id,
                    user_id=actor.principal_id,
                    action="session_revoked",
                    event_metadata={
                        "session_id": str(session_id),
                        "target_user_id": str(session.principal_id),
                        "reason": final_reason,
                        "is_self": is_self,
                    },
                )
                await self.uow.audit_events.create(audit)
                await self.uow.commit()
                logger.info(f"Session revoked: session_id={session_id} by={actor.principal_id}")
            else:
                logger.info(f"Session already revoked: session_id={session_id}")

            return Return.ok(
                RevokeSessionResponse(
                    session_id=str(session_id),
                    already_revoked=not performed,
                    is_current=actor.session_id == session_id,
                )
            )

    async def revoke_other_sessions(self, actor: Actor) -> Result[BulkRevokeResponse]:
        """
        Revoke every active session of the actor except the current one.

        This is a self-service operation (logout other devices).
        """
        if actor.session_id is None:
            return Return.err(Error("SESSION_NOT_FOUND", "Current session not found"))

        now = self.clock()

        async with self.uow:
            count = await self.uow.sessions.revoke_active_by_principal_id(
                actor.principal_id,
                now,
                REVOKE_OTHERS_REASON,
                revoked_by=actor.principal_id,
                except_session_id=actor.session_id,
            )

            audit = AuditEvent(
                tenant_id=actor.tenant_id,
                user_id=actor.principal_id,
                action="revoke_other_sessions",
                event_metadata={
                    "kept_session_id": str(actor.session_id),
                    "revoked_count": count,
                },
            )
            await self.uow.audit_events.create(audit)
            await self.uow.commit()

            logger.info(f"Revoked {count} other session(s) for principal_id={actor.principal_id}")
            return Return.ok(BulkRevokeResponse(revoked_count=count))

    async def revoke_all_sessions(
        self, target_principal_id: UUID, actor: Actor, reason: Optional[str] = None
    ) -> Result[BulkRevokeResponse]:
        """
        Revoke every active session of a principal.

        Tenant admins only reach the target's sessions inside their own tenant.
        """
        is_self = target_principal_id == actor.principal_id
        if is_self or actor.is_platform_level:
            tenant_scope = None
        elif self.authority.can_manage(actor, actor.tenant_id):
            tenant_scope = actor.tenant_id
        else:
            return Return.err(FORBIDDEN_ERROR)

        now = self.clock()
        final_reason = _clean_reason(reason) or REVOKE_ALL_REASON

        async with self.uow:
            count = await self.uow.sessions.revoke_active_by_principal_id(
                target_principal_id,
                now,
                final_reason,
                revoked_by=actor.principal_id,
                tenant_scope=tenant_scope,
            )

            audit = AuditEvent(
                tenant_id=actor.tenant_id,
                user_id=actor.principal_id,
                action="revoke_all_sessions",
                event_metadata={
                    "target_user_id": str(target_principal_id),
                    "revoked_count": count,
                    "is_self": is_self,
                },
            )
            await self.uow.audit_events.create(audit)
            await self.uow.commit()

            logger.info(
                f"Revoked {count} session(s) for principal_id={target_principal_id} by={actor.principal_id}"
            )
            return Return.ok(BulkRevokeResponse(revoked_count=count))
