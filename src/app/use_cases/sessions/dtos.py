"""
Session Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the session domain.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import MembershipRole, Session, SessionStatus


# ============================================================================
# Command DTOs
# ============================================================================


class CreateSessionCommand(BaseModel):
    """Verified identity plus raw request context from the login flow"""

    principal_id: UUID
    tenant_id: Optional[UUID] = None
    role: MembershipRole
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class SessionView(BaseModel):
    """Session as exposed to clients (never includes the token hash)"""

    id: str
    principal_id: str
    tenant_id: Optional[str] = None
    device_name: str
    device_type: str
    browser: str
    os: str
    ip_address: str
    created_at: datetime
    last_seen_at: datetime
    expires_at: datetime
    revoked_at: Optional[datetime] = None
    revoked_reason: Optional[str] = None
    status: str
    is_active: bool
    is_current: bool = False

    @classmethod
    def from_entity(
        cls, session: Session, now: datetime, current_session_id: Optional[UUID] = None
    ) -> "SessionView":
        status = session.status_at(now)
        return cls(
            id=str(session.id),
            principal_id=str(session.principal_id),
            tenant_id=str(session.tenant_id) if session.tenant_id else None,
            device_name=session.device_name,
            device_type=session.device_type,
            browser=session.browser,
            os=session.os,
            ip_address=session.ip_address,
            created_at=session.created_at,
            last_seen_at=session.last_seen_at,
            expires_at=session.expires_at,
            revoked_at=session.revoked_at,
            revoked_reason=session.revoked_reason,
            status=status.value,
            is_active=status == SessionStatus.active,
            is_current=current_session_id is not None and session.id == current_session_id,
        )


class CreateSessionResponse(BaseModel):
    """New session plus the opaque token the client must present"""

    session: SessionView
    token: str
    evicted_session_ids: List[str] = []


class SessionStatsResponse(BaseModel):
    """Status counts taken at a single instant"""

    total_active: int
    total_expired: int
    total_revoked: int
    recent_logins: int


class RevokeSessionResponse(BaseModel):
    """Outcome of a single revocation (idempotent)"""

    session_id: str
    already_revoked: bool
    is_current: bool


class BulkRevokeResponse(BaseModel):
    """Outcome of a bulk revocation"""

    revoked_count: int


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class SessionPage(BaseModel):
    sessions: List[SessionView]
    pagination: Pagination


class DeviceCount(BaseModel):
    device: str
    count: int


class PurgeSessionsResponse(BaseModel):
    purged_count: int
    cutoff: datetime
