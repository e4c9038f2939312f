"""
Session Entity

One authenticated login, bound to the device it was created from.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from .enums import SessionStatus


class Session(SQLModel, table=True):
    """
    Session entity - one independently revocable login.

    Business Rules:
    - Only the SHA-256 hash of the opaque token is stored
    - expires_at is fixed at creation and never renewed by activity
    - last_seen_at only moves forward and is informational
    - revoked_at / revoked_reason are written at most once
    - Status is derived from revoked_at and expires_at, never stored
    - Rows are kept after expiry or revocation for audit and statistics
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    principal_id: UUID = Field(nullable=False, index=True)
    tenant_id: Optional[UUID] = Field(default=None, index=True)
    role: str = Field(max_length=50)

    token_hash: str = Field(unique=True, max_length=64)

    # Fingerprint (captured once at creation)
    device_name: str = Field(max_length=255)
    device_type: str = Field(max_length=20)
    browser: str = Field(max_length=255)
    os: str = Field(max_length=255)
    ip_address: str = Field(max_length=64)

    # Timestamps
    created_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    last_seen_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    # Revocation (set once)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_reason: Optional[str] = Field(default=None, max_length=255)
    revoked_by: Optional[UUID] = Field(default=None)

    __table_args__ = (
        Index("idx_session_principal_created", "principal_id", "created_at"),
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_revoked_at", "revoked_at"),
    )

    def status_at(self, now: datetime) -> SessionStatus:
        # Revocation wins over expiry so the audit reason stays visible
        if self.revoked_at is not None:
            return SessionStatus.revoked
        if now >= self.expires_at:
            return SessionStatus.expired
        return SessionStatus.active

    def is_active_at(self, now: datetime) -> bool:
        return self.status_at(now) == SessionStatus.active
