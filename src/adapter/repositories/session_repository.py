from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, case, delete, func
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository, StatusCounts
from src.domain.entities import Session, SessionStatus


def _active_clause(now: datetime):
    return and_(Session.revoked_at.is_(None), Session.expires_at > now)


def _expired_clause(now: datetime):
    return and_(Session.revoked_at.is_(None), Session.expires_at <= now)


def _revoked_clause():
    return Session.revoked_at.is_not(None)


def _status_clause(status: SessionStatus, now: datetime):
    if status == SessionStatus.revoked:
        return _revoked_clause()
    if status == SessionStatus.expired:
        return _expired_clause(now)
    return _active_clause(now)


def _count_where(clause):
    return func.coalesce(func.sum(case((clause, 1), else_=0)), 0)


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_obj: Session) -> Session:
        """Persist a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        """Get session by token hash (unique index, no scan)"""
        stmt = select(Session).where(Session.token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_principal_id(self, principal_id: UUID) -> List[Session]:
        """Get all sessions for a principal, newest first"""
        stmt = (
            select(Session)
            .where(Session.principal_id == principal_id)
            .order_by(Session.created_at.desc(), Session.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active_by_principal_id(
        self, principal_id: UUID, now: datetime
    ) -> List[Session]:
        """Get active sessions for a principal, oldest first"""
        stmt = (
            select(Session)
            .where(Session.principal_id == principal_id, _active_clause(now))
            .order_by(Session.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def touch(self, session_obj: Session, seen_at: datetime) -> bool:
        """Advance last_seen_at of an active session; an older timestamp never overwrites a newer one"""
        stmt = (
            update(Session)
            .where(Session.id == session_obj.id, _active_clause(seen_at))
            .values(
                last_seen_at=case(
                    (Session.last_seen_at < seen_at, seen_at), else_=Session.last_seen_at
                )
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        if result.rowcount == 0:
            return False
        if session_obj.last_seen_at < seen_at:
            set_committed_value(session_obj, "last_seen_at", seen_at)
        return True

    async def revoke(
        self,
        session_id: UUID,
        revoked_at: datetime,
        reason: str,
        revoked_by: Optional[UUID] = None,
    ) -> bool:
        """Revoke a session; only the first caller matches revoked_at IS NULL"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked_at.is_(None))
            .values(revoked_at=revoked_at, revoked_reason=reason, revoked_by=revoked_by)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_active_by_principal_id(
        self,
        principal_id: UUID,
        now: datetime,
        reason: str,
        revoked_by: Optional[UUID] = None,
        except_session_id: Optional[UUID] = None,
        tenant_scope: Optional[UUID] = None,
    ) -> int:
        """Revoke all active sessions for a principal"""
        conditions = [Session.principal_id == principal_id, _active_clause(now)]
        if except_session_id is not None:
            conditions.append(Session.id != except_session_id)
        if tenant_scope is not None:
            conditions.append(Session.tenant_id == tenant_scope)

        stmt = (
            update(Session)
            .where(*conditions)
            .values(revoked_at=now, revoked_reason=reason, revoked_by=revoked_by)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def list_paginated(
        self,
        now: datetime,
        principal_id: Optional[UUID] = None,
        status: Optional[SessionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Session], int]:
        """List sessions across principals with optional filters"""
        conditions = []
        if principal_id is not None:
            conditions.append(Session.principal_id == principal_id)
        if status is not None:
            conditions.append(_status_clause(status, now))

        count_stmt = select(func.count()).select_from(Session).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Session)
            .where(*conditions)
            .order_by(Session.created_at.desc(), Session.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def count_by_status(self, now: datetime, recent_since: datetime) -> StatusCounts:
        """Count all sessions by status in a single aggregate query"""
        stmt = select(
            _count_where(_active_clause(now)),
            _count_where(_expired_clause(now)),
            _count_where(_revoked_clause()),
            _count_where(Session.created_at >= recent_since),
        ).select_from(Session)
        row = (await self.session.execute(stmt)).one()
        return StatusCounts(
            total_active=int(row[0]),
            total_expired=int(row[1]),
            total_revoked=int(row[2]),
            recent_logins=int(row[3]),
        )

    async def count_active_by_device_type(self, now: datetime) -> List[Tuple[str, int]]:
        """Active sessions grouped by device type, most common first"""
        stmt = (
            select(Session.device_type, func.count())
            .where(_active_clause(now))
            .group_by(Session.device_type)
            .order_by(func.count().desc(), Session.device_type)
        )
        result = await self.session.execute(stmt)
        return [(device_type, count) for device_type, count in result.all()]

    async def delete_expired_before(self, cutoff: datetime) -> int:
        """Delete sessions whose absolute expiry is older than cutoff"""
        stmt = delete(Session).where(Session.expires_at < cutoff)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
