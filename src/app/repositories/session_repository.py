from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import Session, SessionStatus


@dataclass(frozen=True)
class StatusCounts:
    """Session counts classified against a single instant"""

    total_active: int
    total_expired: int
    total_revoked: int
    recent_logins: int


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Persist a new session"""
        pass

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        """Get session by the SHA-256 hash of its token (indexed lookup)"""
        pass

    @abstractmethod
    async def get_by_principal_id(self, principal_id: UUID) -> List[Session]:
        """Get every session of a principal, newest created_at first"""
        pass

    @abstractmethod
    async def get_active_by_principal_id(
        self, principal_id: UUID, now: datetime
    ) -> List[Session]:
        """Get ACTIVE sessions of a principal, oldest created_at first"""
        pass

    @abstractmethod
    async def touch(self, session: Session, seen_at: datetime) -> bool:
        """
        Record activity on a session that is still ACTIVE at seen_at.
        last_seen_at only moves forward; an older seen_at leaves it as is.
        Returns False if the session is missing, revoked or expired.
        """
        pass

    @abstractmethod
    async def revoke(
        self,
        session_id: UUID,
        revoked_at: datetime,
        reason: str,
        revoked_by: Optional[UUID] = None,
    ) -> bool:
        """
        Revoke a session if it is not revoked yet.
        Returns True only for the call that performed the transition.
        """
        pass

    @abstractmethod
    async def revoke_active_by_principal_id(
        self,
        principal_id: UUID,
        now: datetime,
        reason: str,
        revoked_by: Optional[UUID] = None,
        except_session_id: Optional[UUID] = None,
        tenant_scope: Optional[UUID] = None,
    ) -> int:
        """
        Revoke every ACTIVE session of a principal, optionally skipping one
        session and optionally limited to one tenant. Returns count revoked.
        """
        pass

    @abstractmethod
    async def list_paginated(
        self,
        now: datetime,
        principal_id: Optional[UUID] = None,
        status: Optional[SessionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Session], int]:
        """
        List sessions across all principals, newest first.

        Returns:
            Tuple of (page of sessions, total matching count)
        """
        pass

    @abstractmethod
    async def count_by_status(self, now: datetime, recent_since: datetime) -> StatusCounts:
        """Platform-wide status counts at one instant"""
        pass

    @abstractmethod
    async def count_active_by_device_type(self, now: datetime) -> List[Tuple[str, int]]:
        """ACTIVE session counts grouped by device type"""
        pass

    @abstractmethod
    async def delete_expired_before(self, cutoff: datetime) -> int:
        """Physically delete sessions whose expires_at is before cutoff"""
        pass
