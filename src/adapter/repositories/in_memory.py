"""
In-memory repositories.

Used for isolated tests and single-process deployments. Conditional writes
run under a lock so a check and its write can never interleave with another
writer.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.session_repository import ISessionRepository, StatusCounts
from src.domain.entities import AuditEvent, Session, SessionStatus


class InMemoryStore:
    """Shared backing state for any number of in-memory units of work"""

    def __init__(self):
        self.sessions: Dict[UUID, Session] = {}
        self.session_ids_by_token_hash: Dict[str, UUID] = {}
        self.audit_events: List[AuditEvent] = []
        self.lock = threading.Lock()

    def add(self, session: Session) -> Session:
        with self.lock:
            if session.id in self.sessions:
                raise ValueError(f"Session {session.id} already exists")
            if session.token_hash in self.session_ids_by_token_hash:
                raise ValueError("Duplicate session token")
            self.sessions[session.id] = session
            self.session_ids_by_token_hash[session.token_hash] = session.id
        return session


def _newest_first(sessions: List[Session]) -> List[Session]:
    return sorted(sessions, key=lambda s: (s.created_at, str(s.id)), reverse=True)


class InMemorySessionRepository(ISessionRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, session: Session) -> Session:
        return self.store.add(session)

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        return self.store.sessions.get(session_id)

    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        session_id = self.store.session_ids_by_token_hash.get(token_hash)
        if session_id is None:
            return None
        return self.store.sessions.get(session_id)

    async def get_by_principal_id(self, principal_id: UUID) -> List[Session]:
        return _newest_first(
            [s for s in self.store.sessions.values() if s.principal_id == principal_id]
        )

    async def get_active_by_principal_id(
        self, principal_id: UUID, now: datetime
    ) -> List[Session]:
        active = [
            s
            for s in self.store.sessions.values()
            if s.principal_id == principal_id and s.is_active_at(now)
        ]
        return sorted(active, key=lambda s: s.created_at)

    async def touch(self, session: Session, seen_at: datetime) -> bool:
        with self.store.lock:
            stored = self.store.sessions.get(session.id)
            if stored is None or not stored.is_active_at(seen_at):
                return False
            if stored.last_seen_at < seen_at:
                stored.last_seen_at = seen_at
            return True

    async def revoke(
        self,
        session_id: UUID,
        revoked_at: datetime,
        reason: str,
        revoked_by: Optional[UUID] = None,
    ) -> bool:
        with self.store.lock:
            session = self.store.sessions.get(session_id)
            if session is None or session.revoked_at is not None:
                return False
            session.revoked_at = revoked_at
            session.revoked_reason = reason
            session.revoked_by = revoked_by
            return True

    async def revoke_active_by_principal_id(
        self,
        principal_id: UUID,
        now: datetime,
        reason: str,
        revoked_by: Optional[UUID] = None,
        except_session_id: Optional[UUID] = None,
        tenant_scope: Optional[UUID] = None,
    ) -> int:
        count = 0
        with self.store.lock:
            for session in self.store.sessions.values():
                if session.principal_id != principal_id or not session.is_active_at(now):
                    continue
                if session.id == except_session_id:
                    continue
                if tenant_scope is not None and session.tenant_id != tenant_scope:
                    continue
                session.revoked_at = now
                session.revoked_reason = reason
                session.revoked_by = revoked_by
                count += 1
        return count

    async def list_paginated(
        self,
        now: datetime,
        principal_id: Optional[UUID] = None,
        status: Optional[SessionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Session], int]:
        matches = [
            s
            for s in self.store.sessions.values()
            if (principal_id is None or s.principal_id == principal_id)
            and (status is None or s.status_at(now) == status)
        ]
        ordered = _newest_first(matches)
        return ordered[offset : offset + limit], len(ordered)

    async def count_by_status(self, now: datetime, recent_since: datetime) -> StatusCounts:
        counts = {status: 0 for status in SessionStatus}
        recent = 0
        for session in list(self.store.sessions.values()):
            counts[session.status_at(now)] += 1
            if session.created_at >= recent_since:
                recent += 1
        return StatusCounts(
            total_active=counts[SessionStatus.active],
            total_expired=counts[SessionStatus.expired],
            total_revoked=counts[SessionStatus.revoked],
            recent_logins=recent,
        )

    async def count_active_by_device_type(self, now: datetime) -> List[Tuple[str, int]]:
        counts: Dict[str, int] = {}
        for session in self.store.sessions.values():
            if session.is_active_at(now):
                counts[session.device_type] = counts.get(session.device_type, 0) + 1
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    async def delete_expired_before(self, cutoff: datetime) -> int:
        with self.store.lock:
            doomed = [sid for sid, s in self.store.sessions.items() if s.expires_at < cutoff]
            for session_id in doomed:
                session = self.store.sessions.pop(session_id)
                del self.store.session_ids_by_token_hash[session.token_hash]
        return len(doomed)


class InMemoryAuditEventRepository(IAuditEventRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        with self.store.lock:
            self.store.audit_events.append(audit_event)
        return audit_event
